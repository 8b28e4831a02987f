"""
Build errors — what the framework reports when a declaration or module fails.

Load-phase problems are ``DeclarationError``; dependency and action-phase
problems are ``ModuleError``.  The framework collects them per module and
raises a single ``BuildFailure`` at the end of the phase.
"""

from __future__ import annotations


class BuildError(Exception):
    """Base class for every error raised by the build framework."""


class DeclarationError(BuildError):
    """Raised when a module declaration cannot be loaded."""

    def __init__(self, module: str, message: str, source: str = ""):
        self.module = module
        self.message = message
        self.source = source
        where = f"{source}: " if source else ""
        super().__init__(f'{where}module "{module}": {message}')


class ModuleError(BuildError):
    """Raised when a module fails during dependency or action generation."""

    def __init__(self, module: str, message: str, source: str = ""):
        self.module = module
        self.message = message
        self.source = source
        where = f"{source}: " if source else ""
        super().__init__(f'{where}module "{module}": {message}')


class MissingConfigError(BuildError):
    """Raised when a global configuration value is asked for but not set."""


class PhaseError(BuildError):
    """Raised when a context is used outside the phase it belongs to."""


class BuildFailure(BuildError):
    """One or more errors collected during a framework phase."""

    def __init__(self, errors: list[BuildError]):
        self.errors = list(errors)
        lines = "\n".join(f"  {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} error(s):\n{lines}")
