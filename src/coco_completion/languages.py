"""Editor language ids and their file extensions."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Protocol

LANGUAGES: Dict[str, str] = {
    "abap": ".abap",
    "bat": ".bat",
    "c": ".c",
    "clojure": ".clj",
    "coffeescript": ".coffee",
    "cpp": ".cpp",
    "csharp": ".cs",
    "css": ".css",
    "dart": ".dart",
    "dockerfile": ".dockerfile",
    "elixir": ".ex",
    "erlang": ".erl",
    "fsharp": ".fs",
    "go": ".go",
    "groovy": ".groovy",
    "haskell": ".hs",
    "html": ".html",
    "java": ".java",
    "javascript": ".js",
    "javascriptreact": ".jsx",
    "json": ".json",
    "julia": ".jl",
    "kotlin": ".kt",
    "latex": ".tex",
    "less": ".less",
    "lua": ".lua",
    "makefile": ".mk",
    "markdown": ".md",
    "objective-c": ".m",
    "ocaml": ".ml",
    "perl": ".pl",
    "php": ".php",
    "powershell": ".ps1",
    "python": ".py",
    "r": ".r",
    "ruby": ".rb",
    "rust": ".rs",
    "scala": ".scala",
    "scss": ".scss",
    "shellscript": ".sh",
    "sql": ".sql",
    "swift": ".swift",
    "typescript": ".ts",
    "typescriptreact": ".tsx",
    "vue": ".vue",
    "xml": ".xml",
    "yaml": ".yaml",
}

PLAINTEXT = "plaintext"


class NamedDocument(Protocol):
    language_id: str
    file_name: str
    is_untitled: bool


def get_language_file_extension(language_id: str) -> Optional[str]:
    return LANGUAGES.get(language_id)


def get_file_name_with_extension(document: NamedDocument) -> str:
    if not document.is_untitled:
        return document.file_name
    extension = get_language_file_extension(document.language_id)
    if extension:
        return document.file_name + extension
    return document.file_name


def language_id_for_path(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix == ".yml":
        return "yaml"
    for language_id, extension in LANGUAGES.items():
        if extension == suffix:
            return language_id
    return PLAINTEXT
