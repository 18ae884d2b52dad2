"""Key chords: parsing ``"ctrl+shift+x"`` strings and matching key presses."""

from __future__ import annotations

from dataclasses import dataclass

MODIFIERS: tuple[str, ...] = ("ctrl", "shift", "alt", "meta")

# textual key names that differ from the tokens used in key-config.json.
_TEXTUAL_ALIASES: dict[str, str] = {
    "return": "enter",
}

_NAMED_KEYS = frozenset({"space", "tab", "enter", "escape", "backspace", "delete"})


@dataclass(slots=True, frozen=True)
class ChordSpec:
    key: str
    modifiers: frozenset[str] = frozenset()

    def requires(self, modifier: str) -> bool:
        return modifier in self.modifiers


@dataclass(slots=True, frozen=True)
class KeyPress:
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False

    def held(self, modifier: str) -> bool:
        return bool(getattr(self, modifier))

    def without(self, modifier: str) -> KeyPress:
        flags = {name: self.held(name) for name in MODIFIERS}
        flags[modifier] = False
        return KeyPress(key=self.key, **flags)

    @classmethod
    def from_textual_key(cls, key: str, character: str | None = None) -> KeyPress:
        """Build a ``KeyPress`` from a textual ``Key`` event.

        textual reports ``"ctrl+shift+x"`` style names, ``"backtab"`` for
        shift+tab and upper-case letters for shifted letters.
        """
        key = _TEXTUAL_ALIASES.get(key, key)
        if key == "backtab":
            return cls(key="tab", shift=True)

        tokens = key.split("+") if key != "+" else ["+"]
        primary = tokens[-1]
        flags = {name: False for name in MODIFIERS}
        for token in tokens[:-1]:
            if token in flags:
                flags[token] = True

        if primary.startswith("upper_"):
            primary = primary.removeprefix("upper_")
            flags["shift"] = True
        elif len(primary) == 1 and primary.isupper():
            flags["shift"] = True
        elif _is_punctuation_name(primary, character) and not any(flags.values()):
            # Punctuation arrives as a name ("question_mark"); keep the glyph.
            primary = character or primary
        return cls(key=primary.lower(), **flags)


def _is_punctuation_name(primary: str, character: str | None) -> bool:
    return (
        len(primary) > 1
        and primary not in _NAMED_KEYS
        and character is not None
        and len(character) == 1
        and character.isprintable()
        and not character.isalnum()
    )


def parse_chord(text: str) -> ChordSpec | None:
    """Parse a ``+``-joined chord string.

    Returns ``None`` for empty or malformed input so that a bad binding is
    simply unreachable.
    """
    if not isinstance(text, str):
        return None
    tokens = [token.strip() for token in text.lower().split("+")]
    if not tokens or any(not token for token in tokens):
        return None
    *mods, key = tokens
    if any(mod not in MODIFIERS for mod in mods):
        return None
    return ChordSpec(key=key, modifiers=frozenset(mods))


def matches(event: KeyPress, spec: ChordSpec | None) -> bool:
    """Exact chord match: the primary key plus exactly the spec's modifiers."""
    if spec is None or not spec.key:
        return False
    if event.key.lower() != spec.key:
        return False
    for modifier in MODIFIERS:
        # A chord whose primary key is a modifier ("shift") implies that flag.
        if modifier == spec.key:
            continue
        if event.held(modifier) != spec.requires(modifier):
            return False
    return True


def format_chord(spec: ChordSpec | None) -> str:
    if spec is None:
        return "(unbound)"
    parts = [mod.capitalize() for mod in MODIFIERS if spec.requires(mod)]
    parts.append(spec.key if len(spec.key) == 1 else spec.key.capitalize())
    return "+".join(parts)
