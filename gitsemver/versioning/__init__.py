"""
Version derivation engine.

Every step of turning repository state into version variables lives in this
package, leaves first:

1. **Effective configuration** (resolver.py):
   - Folds built-in defaults, the document's global fields and every matching
     branch rule into one immutable EffectiveConfig per computation.

2. **Version source location** (sources.py):
   - Plain strategy functions (tags, merge messages, configured default)
     propose candidates; one selection function picks the winner and applies
     a configured next-version floor.

3. **Increment calculation** (increment.py):
   - Walks the commits since the version source, honors bump directives in
     commit messages and applies the branch's pre-release label.

4. **Variable assembly** (variables.py):
   - Renders the final version into the flat VersionVariables record.

5. **Orchestration** (calculator.py):
   - VersionCalculator ties the steps to the version cache.

6. **Exception hierarchy** (exceptions.py).

Import the submodules directly, e.g.
``from gitsemver.versioning.calculator import compute_version``. This module
must not import its submodules: the git and model layers import
exceptions.py and version.py through it.
"""
