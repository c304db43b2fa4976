"""
Code block language mapping.

Notion only accepts a closed set of language names for code blocks. Fence
tags written by people ("py", "JS", "sh") are normalized into that set, and
stored names are turned back into short fence tags when rendering.
"""

from typing import Dict, FrozenSet

from notion_sync.logger import logger


SUPPORTED_LANGUAGES: FrozenSet[str] = frozenset({
    "abap", "agda", "arduino", "ascii art", "assembly", "bash", "basic", "bnf", "c", "c#", "c++",
    "clojure", "coffeescript", "coq", "css", "dart", "dhall", "diff", "docker", "ebnf", "elixir", "elm",
    "erlang", "f#", "flow", "fortran", "gherkin", "glsl", "go", "graphql", "groovy", "haskell", "hcl",
    "html", "idris", "java", "javascript", "json", "julia", "kotlin", "latex", "less", "lisp", "livescript",
    "llvm ir", "lua", "makefile", "markdown", "markup", "matlab", "mathematica", "mermaid", "nix",
    "notion formula", "objective-c", "ocaml", "pascal", "perl", "php", "plain text", "powershell",
    "prolog", "protobuf", "purescript", "python", "r", "racket", "reason", "ruby", "rust", "sass",
    "scala", "scheme", "scss", "shell", "smalltalk", "solidity", "sql", "swift", "toml", "typescript",
    "vb.net", "verilog", "vhdl", "visual basic", "webassembly", "xml", "yaml", "java/c/c++/c#",
})

DEFAULT_LANGUAGE = "plain text"

# Common fence tags -> Notion language names
LANGUAGE_ALIASES: Dict[str, str] = {
    "ascii": "ascii art",
    "asm": "assembly",
    "sh": "bash",
    "zsh": "shell",
    "csharp": "c#",
    "cs": "c#",
    "cpp": "c++",
    "cc": "c++",
    "clj": "clojure",
    "coffee": "coffeescript",
    "dockerfile": "docker",
    "fsharp": "f#",
    "golang": "go",
    "hs": "haskell",
    "htm": "html",
    "js": "javascript",
    "jsx": "javascript",
    "kt": "kotlin",
    "tex": "latex",
    "llvm": "llvm ir",
    "make": "makefile",
    "md": "markdown",
    "notion-formula": "notion formula",
    "objc": "objective-c",
    "txt": "plain text",
    "text": "plain text",
    "plaintext": "plain text",
    "ps1": "powershell",
    "proto": "protobuf",
    "py": "python",
    "python3": "python",
    "rb": "ruby",
    "rs": "rust",
    "sol": "solidity",
    "ts": "typescript",
    "tsx": "typescript",
    "vb": "vb.net",
    "wasm": "webassembly",
    "yml": "yaml",
}

# Notion language names -> preferred fence tag (identity when absent)
FENCE_TAGS: Dict[str, str] = {
    "ascii art": "ascii",
    "assembly": "asm",
    "c#": "csharp",
    "c++": "cpp",
    "coffeescript": "coffee",
    "docker": "dockerfile",
    "f#": "fsharp",
    "llvm ir": "llvm",
    "notion formula": "notion-formula",
    "objective-c": "objc",
    "plain text": "text",
    "protobuf": "proto",
    "vb.net": "vb",
    "webassembly": "wasm",
}


def normalize_language(tag: str) -> str:
    """Map a free-form fence tag to a supported Notion language.

    Never raises: anything unrecognized (including empty input) maps to
    DEFAULT_LANGUAGE.
    """
    key = (tag or "").strip().lower()
    key = LANGUAGE_ALIASES.get(key, key)
    if key in SUPPORTED_LANGUAGES:
        return key
    if tag and tag.strip():
        logger.debug(f"Unsupported code language '{tag}', using '{DEFAULT_LANGUAGE}'")
    return DEFAULT_LANGUAGE


def denormalize_language(language: str) -> str:
    """Return the fence tag used when rendering a Notion language."""
    if not language:
        return ""
    key = language.strip().lower()
    return FENCE_TAGS.get(key, key)
