"""Deterministic SVG and JSON rendering of one identifier's current state.

Output is a pure function of registry state: attribute order follows first-write
order, JSON is emitted with fixed key order and compact separators, and no
clock, randomness, or locale enters the result.
"""

from __future__ import annotations

import base64
import json
from xml.sax.saxutils import escape

from packages.tincture_registry.attributes import AttributeStore
from packages.tincture_registry.domain import (
    BLOCKED_TRAIT,
    CUSTOMIZED_TRAIT,
    DISPLAY_NAME_TRAIT,
    STAKED_TRAIT,
    WORD_COUNT_TRAIT,
    AttributeEntry,
    RenderedDocument,
    RenderProfile,
)
from packages.tincture_registry.errors import NotIssued
from packages.tincture_registry.interfaces import PeerNameResolver
from packages.tincture_registry.naming import canonicalize_key, is_valid_key
from packages.tincture_registry.state import RegistryState
from packages.tincture_shared.logging import get_logger

_LOGGER = get_logger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
BLOCKED_ATTRIBUTES_JSON = '[{"Blocked":"true"}]'

_LINE_POSITIONS: dict[int, tuple[str, ...]] = {
    0: (),
    1: ("50%",),
    2: ("45%", "55%"),
    3: ("40%", "50%", "60%"),
}


def encode_json(value: object) -> str:
    """Serialize ``value`` in the one canonical form used for every document."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=True)


def data_uri(media_type: str, body: str) -> str:
    encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


class Renderer:
    """Turns records and attribute entries into canonical documents.

    ``peer`` is an optional cooperating registry used to show colour-valued
    traits by their display name. Peer lookups never raise: an unissued key
    or a failing peer falls back to the raw key.
    """

    def __init__(
        self,
        state: RegistryState,
        *,
        profile: RenderProfile,
        attributes: AttributeStore,
        peer: PeerNameResolver | None = None,
    ) -> None:
        self._state = state
        self._profile = profile
        self._attributes = attributes
        self._peer = peer

    @property
    def profile(self) -> RenderProfile:
        return self._profile

    def attach_peer(self, peer: PeerNameResolver | None) -> None:
        self._peer = peer

    def render(self, sequence_id: int, *, holder: str | None = None) -> RenderedDocument:
        """Render the document of one issued identifier."""
        with self._state.transaction() as state:
            record = state.records.get(sequence_id)
            if record is None:
                raise NotIssued("identifier was never issued", sequence_id=sequence_id)
            if sequence_id in state.suppressed:
                return self._render_blocked(sequence_id)

            entries = {
                entry.trait_name: entry
                for entry in self._attributes.entries(sequence_id)
            }
            display_name = entries[DISPLAY_NAME_TRAIT].value
            background = self._color_of(
                entries.get(self._profile.background_trait),
                default=(
                    record.canonical_key
                    if self._profile.key_as_background
                    else self._profile.default_background
                ),
            )
            foreground = self._color_of(
                entries.get(self._profile.foreground_trait),
                default=self._profile.default_foreground,
            )
            svg = self._svg(
                background=background,
                foreground=foreground,
                lines=tuple(display_name.split(" ")),
            )
            attributes = self._attribute_list(entries, display_name, holder)
            return self._document(
                sequence_id,
                name=display_name,
                svg=svg,
                attributes_json=encode_json(attributes),
            )

    def resolve_display_name(self, foreign_key: str) -> str:
        """Return the peer's display name for ``foreign_key`` or the key itself."""
        if self._peer is None:
            return foreign_key
        try:
            resolved = self._peer.display_name_for_key(foreign_key)
        except Exception:  # noqa: BLE001
            _LOGGER.warning(
                "Peer display-name lookup failed; using raw key: key=%s",
                foreign_key,
                exc_info=True,
            )
            return foreign_key
        if resolved is None:
            _LOGGER.warning(
                "Peer registry has not issued key; using raw key: key=%s",
                foreign_key,
            )
            return foreign_key
        return resolved

    def _attribute_list(
        self,
        entries: dict[str, AttributeEntry],
        display_name: str,
        holder: str | None,
    ) -> list[dict[str, str]]:
        profile = self._profile
        color_traits = {profile.background_trait, profile.foreground_trait}
        items: list[dict[str, str]] = []
        for entry in entries.values():
            value = entry.value
            if entry.trait_name in color_traits and is_valid_key(value):
                value = self.resolve_display_name(canonicalize_key(value))
            items.append({"trait_type": entry.trait_name, "value": value})

        if profile.include_word_count:
            items.append(
                {"trait_type": WORD_COUNT_TRAIT, "value": str(len(display_name.split(" ")))}
            )
        customized = all(
            entry is not None and entry.origin == "holder"
            for entry in (
                entries.get(profile.background_trait),
                entries.get(profile.foreground_trait),
            )
        )
        items.append({"trait_type": CUSTOMIZED_TRAIT, "value": _flag(customized)})
        custody = self._state.staking_custody
        staked = holder is not None and custody is not None and holder == custody
        items.append({"trait_type": STAKED_TRAIT, "value": _flag(staked)})
        return items

    def _render_blocked(self, sequence_id: int) -> RenderedDocument:
        svg = self._svg(
            background=self._profile.default_background,
            foreground=self._profile.default_foreground,
            lines=(BLOCKED_TRAIT,),
        )
        return self._document(
            sequence_id,
            name=f"{self._profile.collection_name} #{sequence_id}",
            svg=svg,
            attributes_json=BLOCKED_ATTRIBUTES_JSON,
        )

    def _document(
        self, sequence_id: int, *, name: str, svg: str, attributes_json: str
    ) -> RenderedDocument:
        image = data_uri("image/svg+xml", svg)
        # attributes_json is already canonical; splice it in verbatim
        head = encode_json(
            {
                "name": name,
                "description": self._profile.description,
                "image": image,
            }
        )
        document_json = f'{head[:-1]},"attributes":{attributes_json}}}'
        return RenderedDocument(
            sequence_id=sequence_id,
            svg=svg,
            attributes_json=attributes_json,
            document_json=document_json,
            data_uri=data_uri("application/json", document_json),
        )

    def _svg(self, *, background: str, foreground: str, lines: tuple[str, ...]) -> str:
        profile = self._profile
        parts = [
            f'<svg xmlns="{SVG_NAMESPACE}" width="{profile.width}" '
            f'height="{profile.height}" viewBox="0 0 {profile.width} {profile.height}">',
            f'<rect width="100%" height="100%" fill="{background}"/>',
        ]
        font_family = escape(profile.font_family, {'"': "&quot;"})
        for text, y in zip(lines, _LINE_POSITIONS[len(lines)]):
            parts.append(
                f'<text x="50%" y="{y}" fill="{foreground}" font-family="{font_family}" '
                f'font-size="{profile.font_size}" text-anchor="middle" '
                f'dominant-baseline="middle">{escape(text)}</text>'
            )
        parts.append("</svg>")
        return "".join(parts)

    @staticmethod
    def _color_of(entry: AttributeEntry | None, *, default: str) -> str:
        if entry is not None and is_valid_key(entry.value):
            return canonicalize_key(entry.value)
        return default


def _flag(value: bool) -> str:
    return "true" if value else "false"
