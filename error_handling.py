"""
Error reporting for the Monkey interpreter host
Language-level errors stay values; these types carry them across the host boundary
"""

from typing import Dict, List, Optional


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_error_report(
    kind: str,
    messages: List[str],
    source_name: str = "<input>",
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable error report structure"""
    return {
        'kind': kind,
        'messages': list(messages),
        'source_name': source_name,
        'suggestions': suggestions or []
    }


def format_error_report(report: Dict) -> str:
    """Format an error report as a banner-style string"""
    count = len(report['messages'])
    noun = "error" if count == 1 else "errors"
    error_msg = f"{report['kind']} ({count} {noun}) in {report['source_name']}:\n"

    for message in report['messages']:
        error_msg += f"  {message}\n"

    if report['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in report['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def generate_parse_suggestions(messages: List[str]) -> List[str]:
    """Generate helpful suggestions based on the parser's messages"""
    suggestions = []
    joined = "\n".join(messages)

    if "no prefix parse function for ILLEGAL" in joined:
        suggestions.append("The source contains a character Monkey does not understand")

    if "expected next token to be )" in joined:
        suggestions.append("Check for an unclosed '(' in a call, condition or parameter list")

    if "expected next token to be }" in joined or "expected next token to be {" in joined:
        suggestions.append("Function and if bodies must be wrapped in braces { }")

    if "expected next token to be =" in joined:
        suggestions.append("let bindings take the form: let name = value;")

    if "as integer" in joined:
        suggestions.append("Integers are signed 64-bit values")

    return suggestions


def generate_runtime_suggestions(message: str) -> List[str]:
    """Generate helpful suggestions based on a runtime error message"""
    suggestions = []

    if message.startswith("identifier not found"):
        suggestions.append("Bind the name with let before using it")
    elif message.startswith("type mismatch"):
        suggestions.append("Both operands of an arithmetic operator must be integers")
    elif message.startswith("unusable as hash key"):
        suggestions.append("Only integers, booleans and strings can be hash keys")
    elif message.startswith("wrong number of arguments"):
        suggestions.append("Check the call against the function's parameter list")
    elif message.startswith("stack exhausted"):
        suggestions.append("Add a base case to the recursion, or raise --recursion-limit")

    return suggestions


def format_parse_errors(messages: List[str], source_name: str = "<input>") -> str:
    """Render the parser's messages as a report for the command line"""
    report = make_error_report(
        "Syntax error", messages, source_name,
        generate_parse_suggestions(messages))
    return format_error_report(report)


def format_runtime_error(message: str, source_name: str = "<input>") -> str:
    """Render a runtime error message as a report for the command line"""
    report = make_error_report(
        "Runtime error", [message], source_name,
        generate_runtime_suggestions(message))
    return format_error_report(report)


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class MonkeyParseError(Exception):
    """Raised by strict parsing entry points when syntax errors were collected"""
    def __init__(self, messages: List[str], source_name: str = "<input>"):
        self.messages = list(messages)
        self.source_name = source_name
        super().__init__("; ".join(self.messages))

    def __str__(self) -> str:
        return format_parse_errors(self.messages, self.source_name)


class MonkeyRuntimeError(Exception):
    """Host-side carrier for a runtime error produced by evaluation"""
    def __init__(self, message: str, source_name: str = "<input>"):
        self.message = message
        self.source_name = source_name
        super().__init__(message)

    def __str__(self) -> str:
        return format_runtime_error(self.message, self.source_name)


class MonkeyStackExhausted(MonkeyRuntimeError):
    """Evaluation ran out of host call stack (usually unbounded recursion)"""
    def __init__(self, depth_limit: int, source_name: str = "<input>"):
        self.depth_limit = depth_limit
        super().__init__(
            f"stack exhausted: maximum recursion depth {depth_limit} exceeded",
            source_name)
