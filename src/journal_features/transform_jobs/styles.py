"""Transformation style presets."""

from typing import Final

from journal_core.models.style import StyleConfiguration

MODEL_BYTEDANCE_4: Final = "bytedance:4@1"
MODEL_BYTEDANCE_3: Final = "bytedance:3@1"

ILLUSTRATION: Final = StyleConfiguration(
    name="Illustration",
    model=MODEL_BYTEDANCE_4,
    positive_prompt=(
        "Convert this image to a stylized game art similar to Grand Theft Auto. "
        "Preserve the exact composition, existing subjects, background, proportions, "
        "and perspective. Only change the rendering style similar to GTA: cinematic "
        "lighting, slightly desaturated colors, stylized textures. Do not add or remove "
        "any objects or people. Keep the scene exactly as-is."
    ),
    cfg_scale=1.0,
)

ANIME: Final = StyleConfiguration(
    name="Anime",
    model=MODEL_BYTEDANCE_3,
    positive_prompt=(
        "Convert this image into stylized anime art similar to Studio Ghibli. "
        "Preserve the exact composition, existing subjects, background, proportions, "
        "and perspective. Only change the rendering style similar to Studio Ghibli: soft "
        "colors, whimsical shading, cinematic lighting, and hand-painted textures. Do not "
        "add or remove any objects or people. Keep the scene exactly as-is."
    ),
    cfg_scale=1.2,
)

PIXEL_ART: Final = StyleConfiguration(
    name="Pixel Art",
    model=MODEL_BYTEDANCE_3,
    positive_prompt=(
        "Convert this image into a retro pixel art style. Use limited color palette, "
        "sharp pixel edges, and classic 8-bit or 16-bit video game aesthetics. Preserve "
        "the composition and subjects but render everything in a pixelated style with "
        "clear, distinct pixels. Do not add or remove objects."
    ),
    cfg_scale=1.5,
)

STYLES: Final[dict[str, StyleConfiguration]] = {
    style.name: style for style in (ILLUSTRATION, ANIME, PIXEL_ART)
}

DEFAULT_STYLE: Final = ILLUSTRATION


def style_for(name: str) -> StyleConfiguration:
    """Return the preset called *name*, falling back to Illustration."""
    return STYLES.get(name, DEFAULT_STYLE)
