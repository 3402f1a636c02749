"""
Compiler error hierarchy.

Every fatal condition raised by a pipeline stage derives from CompilerError;
the orchestrator turns them into a failed CompileResult.
"""

from typing import List, Optional


class CompilerError(Exception):
    """Base exception for compiler errors."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(CompilerError):
    """A required argument is empty or has the wrong type."""
    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} must be a non-empty string")
        self.field = field


class StoreError(CompilerError):
    """The vault store failed to list, read or write a path."""
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class DirectoryNotFound(CompilerError):
    def __init__(self, path: str):
        super().__init__(f"Directory does not exist: {path}")
        self.path = path


class NoModulesFound(CompilerError):
    def __init__(self, directory: str):
        super().__init__(f"No script files found in directory: {directory}")
        self.directory = directory


class DuplicateModuleName(CompilerError):
    def __init__(self, name: str):
        super().__init__(f"Duplicate filename detected: {name}. All files must have unique names.")
        self.name = name


class EntryNotFound(CompilerError):
    def __init__(self, name: str):
        super().__init__(f"Main component '{name}' not found in project directory")
        self.name = name


class CircularDependency(CompilerError):
    def __init__(self, path: List[str]):
        super().__init__(f"Circular dependency detected: {' → '.join(path)}")
        self.path = list(path)


class MissingDependency(CompilerError):
    def __init__(self, name: str, required_by: str):
        super().__init__(f"Missing dependency: '{name}' required by '{required_by}'")
        self.name = name
        self.required_by = required_by


class UnresolvedReference(CompilerError):
    def __init__(self, name: str, context: str):
        super().__init__(f"Cannot resolve dependency: {name} (from: {context})")
        self.name = name
        self.context = context
