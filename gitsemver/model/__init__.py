from gitsemver.model.config import BranchConfig, ConfigDocument
from gitsemver.model.variables import VersionVariables

__all__ = ["BranchConfig", "ConfigDocument", "VersionVariables"]
