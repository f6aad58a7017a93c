"""Translate technical errors to user-friendly messages."""

import re
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class UserFriendlyError:
    """User-friendly error representation."""
    original_error: Exception
    title: str
    explanation: str
    actions: List[str]
    show_technical: bool = False


class ErrorTranslator:
    """Translate technical errors to user-friendly messages."""

    ERROR_PATTERNS = {
        r"IndexInvariantError": {
            "title": "Module index is inconsistent",
            "explanation": "A module reached serialization with duplicate entries. "
                           "Its artifact was not written; other modules are unaffected.",
            "actions": [
                "Re-run the build; the collector drops duplicates on a clean pass",
                "Check for hand-built ModuleIndex objects that skip the collector",
            ],
        },

        r"SourceFormatError": {
            "title": "Cannot read declaration input",
            "explanation": "An input file is not valid JSON, JSON Lines, YAML or sidebar-items.js.",
            "actions": [
                "Check the file extension matches its contents (.json, .jsonl, .yaml, .js)",
                "Validate the file: docindex check <file>",
            ],
        },

        r"MalformedDeclarationError|DuplicateEntryError": {
            "title": "Invalid declarations",
            "explanation": "Some declarations were skipped because they are incomplete or repeated.",
            "actions": [
                "List the skipped items: docindex check <file>",
                "Every declaration needs a module_path, a kind and a name",
            ],
        },

        r"config.*not.*found|no such file.*docindex\.yaml": {
            "title": "Configuration missing",
            "explanation": "The configuration file was not found.",
            "actions": [
                "Create docindex.yaml or pass --config",
                "Or set DOCINDEX_* environment variables",
            ],
        },

        r"permission denied|read-only file system": {
            "title": "Cannot write artifacts",
            "explanation": "The output directory is not writable.",
            "actions": [
                "Check permissions on the output directory",
                "Pass a different --output directory",
            ],
        },
    }

    def translate(self, error: Exception) -> UserFriendlyError:
        """Convert exception to user-friendly format."""
        error_str = str(error)
        error_type = type(error).__name__
        full_error = f"{error_type}: {error_str}"

        for pattern, translation in self.ERROR_PATTERNS.items():
            if re.search(pattern, full_error, re.IGNORECASE):
                return UserFriendlyError(
                    original_error=error,
                    title=translation["title"],
                    explanation=translation["explanation"],
                    actions=translation["actions"],
                    show_technical=True,
                )

        return UserFriendlyError(
            original_error=error,
            title="Unexpected error",
            explanation=str(error),
            actions=[
                "Re-run with --verbose for details",
                "Check logs for details",
            ],
            show_technical=True,
        )

    def format_for_cli(self, friendly_error: UserFriendlyError) -> str:
        """Format error for CLI display."""
        output = f"[bold red]{friendly_error.title}[/]\n\n"
        output += f"{friendly_error.explanation}\n\n"

        output += "[bold]How to fix:[/]\n"
        for i, action in enumerate(friendly_error.actions, 1):
            output += f"  {i}. {action}\n"

        if friendly_error.show_technical:
            output += f"\n[dim]Technical details:[/]\n[dim]{friendly_error.original_error}[/]"

        return output
