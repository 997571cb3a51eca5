"""Call-seq signature grammar.

A call-seq line reads::

    receiver.method(args) {|params| ... } -> type or other_type

The same grammar serves two purposes: a lenient detector used while
segmenting (``looks_like_signature``) and a strict parser that turns a line
into a ``CallSeqEntry`` (``parse_call_seq_line``).
"""

import re
from typing import List, Optional, Tuple

from docconform.exceptions import CallSeqSyntaxError
from docconform.models import (
    ArgumentDescriptor,
    ArgumentKind,
    BlockDescriptor,
    CallSeqEntry,
    CallSeqLineError,
    CallSeqParse,
    SourceLine,
)

ARROWS = ("->", "→", "=>")

_IDENT = r"[A-Za-z_]\w*"
_NAME = r"(?:[A-Za-z_]\w*[?!=]?|\[\]=?)"

METHOD_CALL = re.compile(
    rf"^(?:(?P<recv>{_IDENT})(?P<sep>\.|::))?(?P<name>{_NAME})$"
)
ELEMENT_REFERENCE = re.compile(
    rf"^(?P<recv>{_IDENT})\[(?P<args>.*)\](?:\s*=\s*(?P<value>\S.*))?$"
)
BINARY_OPERATOR = re.compile(
    rf"^(?P<recv>{_IDENT})\s*"
    r"(?P<op><=>|===|==|=~|!=|!~|<<|>>|<=|>=|\*\*|[+\-*/%<>&|^])"
    r"\s*(?P<arg>\S.*)$"
)
UNARY_OPERATOR = re.compile(rf"^(?P<op>[-+!~])(?P<recv>{_IDENT})$")
BLOCK_BRACES = re.compile(r"^\{\s*(?:\|(?P<params>[^|]*)\|)?[^{}|]*\}$")
BLOCK_DO = re.compile(r"^do\s*(?:\|(?P<params>[^|]*)\|)?.*?\bend$")
ARGUMENT = re.compile(
    r"^(?P<prefix>\*\*|\*|&)?(?P<name>[A-Za-z_]\w*|\.\.\.)"
    r"(?:\s*(?P<kw>:)\s*(?P<kwdefault>.+)?|\s*=\s*(?P<default>.+))?$"
)

_DETECTOR = re.compile(
    rf"^(?!.*#)(?:{_IDENT}(?:\.|::))?{_NAME}\s*(?:\(.*\))?\s*(?:\{{.*\}}|do\b.*end)?\s*(?:->|→|=>)\s*\S"
    rf"|^(?!.*#){_IDENT}\s*(?:\[.*\]|\S{{1,3}}\s*\S+).*?\s(?:->|→|=>)\s*\S"
    rf"|^(?!.*#)[-+!~]{_IDENT}\s*(?:->|→|=>)\s*\S"
)

_OPTIONAL_GROUP = re.compile(r"\s*\[\s*,\s*")

_CLOSERS = {"(": ")", "[": "]", "{": "}"}


def looks_like_signature(text: str) -> bool:
    """Lenient check used to detect call-seq lines.

    Args:
        text: One line of text, markup removed

    Returns:
        True if the line reads like a signature with a return arrow
    """
    return bool(_DETECTOR.match(text.strip()))


def parse_call_seq_line(text: str, line: int = 0) -> CallSeqEntry:
    """Parse one call-seq line into an entry.

    Args:
        text: The signature line
        line: Line number within the block

    Returns:
        Parsed CallSeqEntry

    Raises:
        CallSeqSyntaxError: If the line does not match the grammar
    """
    source = text.strip()
    if not source:
        raise CallSeqSyntaxError("empty call-seq line", line=line)

    signature, arrow, returns_text = _split_arrow(source, line)
    returns = _parse_returns(returns_text, line)

    head, block = _split_block(signature, line)
    receiver, name, arguments, parenthesized = _parse_head(head, line)

    for argument in arguments:
        if argument.kind == ArgumentKind.BLOCK:
            if block is not None:
                raise CallSeqSyntaxError(
                    f"block given twice in {source!r}", line=line
                )
            block = BlockDescriptor(params=[], rendering="ampersand")

    return CallSeqEntry(
        receiver=receiver,
        name=name,
        arguments=arguments,
        block=block,
        returns=returns,
        arrow=arrow,
        parenthesized=parenthesized,
        text=source,
        line=line,
    )


def parse_call_seq(lines: List[SourceLine]) -> CallSeqParse:
    """Parse every call-seq line, collecting failures instead of raising."""
    entries = []
    errors = []
    for source_line in lines:
        try:
            entries.append(parse_call_seq_line(source_line.text, source_line.line))
        except CallSeqSyntaxError as e:
            errors.append(
                CallSeqLineError(line=source_line.line, text=source_line.text, message=e.message)
            )
    return CallSeqParse(entries=entries, errors=errors)


def _split_arrow(source: str, line: int) -> Tuple[str, str, str]:
    """Split a line at its top-level return arrow."""
    for arrow in ARROWS:
        index = _find_top_level(source, arrow)
        if index is None:
            continue
        signature = source[:index].strip()
        returns = source[index + len(arrow):].strip()
        if not signature:
            raise CallSeqSyntaxError(f"missing signature before {arrow!r}", line=line)
        return signature, arrow, returns

    raise CallSeqSyntaxError(f"missing return type in {source!r}", line=line)


def _find_top_level(source: str, token: str) -> Optional[int]:
    """Index of the first occurrence of token outside brackets."""
    depth = 0
    i = 0
    while i < len(source):
        char = source[i]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(0, depth - 1)
        elif depth == 0 and source.startswith(token, i):
            # '<=>' contains '=>' but is an operator, not an arrow
            if token == "=>" and i > 0 and source[i - 1] == "<":
                i += 1
                continue
            return i
        i += 1
    return None


def _parse_returns(text: str, line: int) -> List[str]:
    """Split a return description into its disjunction of type labels."""
    parts = re.split(r"\s*,\s*or\s+|\s+or\s+|\s*,\s*|\s*\|\s*", text.strip())
    labels = [part.strip() for part in parts if part.strip()]
    if not labels:
        raise CallSeqSyntaxError("missing return type after arrow", line=line)
    return labels


def _split_block(signature: str, line: int) -> Tuple[str, Optional[BlockDescriptor]]:
    """Separate a trailing block form from the rest of the signature."""
    if signature.endswith("}"):
        start = _matching_open(signature, len(signature) - 1)
        if start is None:
            raise CallSeqSyntaxError("unbalanced braces in block form", line=line)
        match = BLOCK_BRACES.match(signature[start:])
        if match is None:
            raise CallSeqSyntaxError(
                f"block form {signature[start:]!r} is not written as {{|...| ... }}",
                line=line,
            )
        return signature[:start].strip(), BlockDescriptor(
            params=_split_params(match.group("params")), rendering="braces"
        )

    do_index = signature.find(" do")
    if signature.endswith(" end") and do_index != -1:
        match = BLOCK_DO.match(signature[do_index + 1:])
        params = _split_params(match.group("params")) if match else []
        return signature[:do_index].strip(), BlockDescriptor(params=params, rendering="do")

    return signature, None


def _matching_open(text: str, close_index: int) -> Optional[int]:
    """Find the opening bracket matching the closer at close_index."""
    closer = text[close_index]
    opener = {v: k for k, v in _CLOSERS.items()}[closer]
    depth = 0
    for i in range(close_index, -1, -1):
        if text[i] == closer:
            depth += 1
        elif text[i] == opener:
            depth -= 1
            if depth == 0:
                return i
    return None


def _split_params(params: Optional[str]) -> List[str]:
    if not params:
        return []
    return [p.strip() for p in params.split(",") if p.strip()]


def _parse_head(
    head: str, line: int
) -> Tuple[Optional[str], str, List[ArgumentDescriptor], bool]:
    """Parse receiver, method name and arguments."""
    if not head:
        raise CallSeqSyntaxError("missing method name", line=line)

    if head.endswith(")"):
        start = _matching_open(head, len(head) - 1)
        if start is None or start == 0:
            raise CallSeqSyntaxError("unbalanced parentheses in argument list", line=line)
        match = METHOD_CALL.match(head[:start].strip())
        if match is None:
            raise CallSeqSyntaxError(f"unrecognized method name in {head!r}", line=line)
        arguments = _parse_arguments(head[start + 1:-1], line)
        return match.group("recv"), match.group("name"), arguments, True

    match = METHOD_CALL.match(head)
    if match is not None:
        return match.group("recv"), match.group("name"), [], False

    match = ELEMENT_REFERENCE.match(head)
    if match is not None:
        arguments = _parse_arguments(match.group("args"), line)
        name = "[]"
        if match.group("value"):
            name = "[]="
            arguments.append(ArgumentDescriptor(name=match.group("value").strip()))
        return match.group("recv"), name, arguments, False

    match = UNARY_OPERATOR.match(head)
    if match is not None:
        return match.group("recv"), match.group("op") + "@", [], False

    match = BINARY_OPERATOR.match(head)
    if match is not None:
        argument = _parse_argument(match.group("arg"), line)
        return match.group("recv"), match.group("op"), [argument], False

    raise CallSeqSyntaxError(f"unrecognized signature {head!r}", line=line)


def _parse_arguments(text: str, line: int) -> List[ArgumentDescriptor]:
    """Parse an argument list, including old-style optional groups."""
    # "a [, b]" is read as "a, [b]"
    text = _OPTIONAL_GROUP.sub(", [", text).strip().lstrip(",").strip()
    if not text:
        return []

    arguments = []
    for part in _split_top_level(text, ","):
        source = part.strip()
        if source.startswith("[") and source.endswith("]"):
            arguments.extend(
                a.model_copy(update={"default": a.default or "optional"})
                for a in _parse_arguments(source[1:-1], line)
            )
        else:
            arguments.append(_parse_argument(source, line))
    return arguments


def _split_top_level(text: str, separator: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for char in text:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(0, depth - 1)
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def _parse_argument(text: str, line: int) -> ArgumentDescriptor:
    """Parse one argument descriptor."""
    source = text.strip()
    if not source:
        raise CallSeqSyntaxError("empty argument in argument list", line=line)

    match = ARGUMENT.match(source)
    if match is None:
        raise CallSeqSyntaxError(f"malformed argument {source!r}", line=line)

    name = match.group("name")
    prefix = match.group("prefix")
    if name == "...":
        return ArgumentDescriptor(name=name, kind=ArgumentKind.FORWARD)
    if prefix == "&":
        return ArgumentDescriptor(name=name, kind=ArgumentKind.BLOCK)
    if prefix == "**":
        return ArgumentDescriptor(name=name, kind=ArgumentKind.DOUBLE_SPLAT)
    if prefix == "*":
        return ArgumentDescriptor(name=name, kind=ArgumentKind.SPLAT)
    if match.group("kw"):
        default = match.group("kwdefault")
        return ArgumentDescriptor(
            name=name,
            kind=ArgumentKind.KEYWORD,
            default=default.strip() if default else None,
        )
    default = match.group("default")
    return ArgumentDescriptor(name=name, default=default.strip() if default else None)
