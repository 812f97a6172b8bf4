"""
Error handling for Splax
Diagnostics are plain dictionaries collected into a caller-owned list;
runtime failures are raised as SplaxRuntimeError and turned into diagnostics
at the interpreter boundary
"""

from typing import List, Dict, Optional


LEXICAL = "lexical"
SYNTAX = "syntax"
RUNTIME = "runtime"


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_diagnostic(kind: str, line: int, message: str, context: str = "") -> Dict:
    """Create an immutable diagnostic structure"""
    return {
        'kind': kind,
        'line': line,
        'message': message,
        'context': context,
    }


def format_diagnostic(diagnostic: Dict) -> str:
    """Format a diagnostic the way every phase reports it"""
    return f"[line {diagnostic['line']}] Error '{diagnostic['context']}' : {diagnostic['message']}"


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, context_lines: int = 0) -> str:
    """Get the source lines around an error, marking the offending line"""
    lines = source_text.split('\n')
    if line_num < 1 or line_num > len(lines):
        return ""

    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        marker = ">" if i == line_num - 1 else " "
        context_parts.append(f"{marker}{i+1:4d}: {lines[i]}")

    return '\n'.join(context_parts)


def has_compile_errors(diagnostics: List[Dict]) -> bool:
    """True if any lexical or syntax diagnostic was recorded"""
    return any(d['kind'] in (LEXICAL, SYNTAX) for d in diagnostics)


# ============================================================================
# COLLECTOR
# ============================================================================

class DiagnosticCollector:
    """Accumulates diagnostics from every phase into one shared list"""

    def __init__(self, diagnostics: Optional[List[Dict]] = None):
        self.diagnostics = diagnostics if diagnostics is not None else []

    def report(self, kind: str, line: int, message: str, context: str = "") -> Dict:
        diagnostic = make_diagnostic(kind, line, message, context)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def has_compile_errors(self) -> bool:
        return has_compile_errors(self.diagnostics)

    def formatted(self) -> List[str]:
        return [format_diagnostic(d) for d in self.diagnostics]

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class SplaxParseError(Exception):
    """Raised inside the parser to unwind to the nearest statement boundary"""
    def __init__(self, message: str, line: int = 0, context: str = ""):
        self.message = message
        self.line = line
        self.context = context
        super().__init__(message)


class SplaxRuntimeError(Exception):
    """Runtime failure during evaluation: type mismatch, undefined name, bad call"""
    def __init__(self, message: str, line: int = 0):
        self.message = message
        self.line = line
        super().__init__(message)

    def to_diagnostic(self) -> Dict:
        return make_diagnostic(RUNTIME, self.line, self.message)

    def __str__(self) -> str:
        return format_diagnostic(self.to_diagnostic())
