from __future__ import annotations

from tgrep.models.search import SearchError, SearchErrorCode, SearchSummary


def describe_os_error(exc: OSError) -> str:
    return exc.strerror or str(exc) or type(exc).__name__


def printable(text: str, encoding: str = "utf-8") -> str:
    """Render *text* so that writing it to a stream in *encoding* cannot raise.

    File names that are not valid UTF-8 reach Python as surrogate escapes; they
    come out as ``\\xff``-style escapes, and characters the stream's encoding
    cannot represent are escaped the same way.
    """
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        # Lone surrogates outside the escape range.
        raw = text.encode("utf-8", "backslashreplace")
    decoded = raw.decode("utf-8", "backslashreplace")
    return decoded.encode(encoding, "backslashreplace").decode(encoding)


def format_error(error: SearchError) -> str:
    if error.code is SearchErrorCode.INVALID_PATTERN:
        tag = "config error"
    elif error.code.is_traversal:
        tag = "walk error"
    else:
        tag = "error"
    if not error.path:
        return f"[{tag}] {error.message}"
    return f"[{tag}] {error.path}: {error.message}"


def format_summary(summary: SearchSummary) -> str:
    return f"Scanned {summary.stats.files_scanned} files in {summary.elapsed_ms}ms."
