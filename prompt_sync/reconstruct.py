"""Rebuild literal prompt text from its piece/identifier encoding."""

from prompt_sync.models import Prompt


def reconstruct(
    pieces: list[str],
    identifiers: list[int],
    identifier_map: dict[str, str],
) -> str:
    """Interleave pieces with the variable references their boundaries point at.

    Pieces already carry the ``${`` and ``}`` delimiters, so only the bare
    variable reference is emitted between them. A boundary whose identifier is
    missing from ``identifier_map`` (or has no identifier at all) is skipped
    silently and the neighbouring pieces are joined directly.
    """
    if not pieces:
        return ""
    if len(pieces) == 1:
        return pieces[0]

    parts: list[str] = []
    for i, piece in enumerate(pieces):
        parts.append(piece)
        if i < len(pieces) - 1 and i < len(identifiers):
            variable = identifier_map.get(str(identifiers[i]))
            if variable:
                parts.append(variable)
    return "".join(parts)


def reconstruct_prompt(prompt: Prompt) -> str:
    return reconstruct(prompt.pieces, prompt.identifiers, prompt.identifier_map)
