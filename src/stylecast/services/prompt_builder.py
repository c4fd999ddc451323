"""Builds the generation prompt for a chosen artwork.

The prompt is assembled only on the client side from a fixed template. Keyword
lookup goes artist first, then style category, then a generic default.
"""

from __future__ import annotations

from typing import Mapping, Optional

from ..models.media import StyleDescriptor


ARTIST_KEYWORDS = {
    # Impressionism
    "Claude Monet": "soft brushstrokes, dappled light, vibrant colors, outdoor atmosphere, impressionist painting style",
    "Pierre-Auguste Renoir": "warm tones, soft focus, luminous skin, joyful atmosphere, impressionist portrait style",
    "Edgar Degas": "dynamic composition, ballet dancers, indoor lighting, pastel colors, impressionist scene",
    # Expressionism
    "Edvard Munch": "emotional intensity, swirling forms, dramatic colors, expressionist painting style",
    "Egon Schiele": "angular lines, emotional depth, expressive gestures, expressionist portrait style",
    # Post-impressionism
    "Vincent van Gogh": "thick impasto brushstrokes, swirling patterns, vibrant colors, emotional intensity, post-impressionist style",
    "Paul Cézanne": "geometric forms, structured composition, muted colors, post-impressionist style",
    # Fauvism
    "Henri Matisse": "bold colors, simplified forms, decorative patterns, fauvist painting style",
    # Cubism
    "Pablo Picasso": "fragmented forms, multiple perspectives, geometric shapes, cubist painting style",
}

STYLE_KEYWORDS = {
    "impressionism": "soft brushstrokes, natural light, outdoor scene, vibrant colors",
    "expressionism": "emotional expression, bold colors, distorted forms, dramatic mood",
    "fauvism": "wild colors, simplified forms, bold brushwork",
    "cubism": "geometric shapes, fragmented perspective, angular forms",
    "surrealism": "dreamlike quality, imaginative elements, surreal atmosphere",
    "romanticism": "dramatic lighting, emotional atmosphere, sublime beauty",
    "baroque": "dramatic chiaroscuro, rich colors, ornate details",
    "renaissance": "realistic proportions, balanced composition, classical beauty",
}

DEFAULT_KEYWORDS = "artistic painting style"

_LEAD_IN = "A beautiful painting"
_QUALITY_BOILERPLATE = "masterpiece, high quality, professional artwork, detailed, artistic interpretation"

_PROMPT_TEMPLATE = "{lead_in} in the style of {artist}, {keywords}, {boilerplate}"


class PromptBuilder:
    """Maps a StyleDescriptor to a prompt using pluggable keyword tables."""

    def __init__(
        self,
        artist_keywords: Optional[Mapping[str, str]] = None,
        style_keywords: Optional[Mapping[str, str]] = None,
        default_keywords: str = DEFAULT_KEYWORDS,
    ):
        if not (default_keywords or "").strip():
            raise ValueError("default_keywords must not be empty")
        self._artists = dict(ARTIST_KEYWORDS if artist_keywords is None else artist_keywords)
        self._styles = dict(STYLE_KEYWORDS if style_keywords is None else style_keywords)
        self._default = default_keywords

    def keywords_for(self, style: StyleDescriptor) -> str:
        return (
            self._artists.get(style.artist)
            or self._styles.get(style.style)
            or (style.keywords or "").strip()
            or self._default
        )

    def build(self, style: StyleDescriptor) -> str:
        """Returns the full prompt. Same descriptor always yields the same string."""
        artist = (style.artist or "").strip() or "an old master"
        return _PROMPT_TEMPLATE.format(
            lead_in=_LEAD_IN,
            artist=artist,
            keywords=self.keywords_for(style),
            boilerplate=_QUALITY_BOILERPLATE,
        )


_default_builder = PromptBuilder()


def build_prompt(style: StyleDescriptor) -> str:
    return _default_builder.build(style)
