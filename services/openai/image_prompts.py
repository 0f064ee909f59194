"""Prompt builders for image generation and prompt refinement."""

import re

PREFIX_PATTERN = re.compile(
    r"^(generate|create|make|draw|show me|paint|give me)\b"
    r"(\s+(an?|the|this)\b)?"
    r"(\s+(image|picture|photo|one)\b)?"
    r"(\s+(of|like|with)\b)?",
    re.IGNORECASE,
)


def build_generation_prompt(creative_description: str) -> str:
    """Wrap a creative description in the fixed image-generation instructions."""
    return f"""
<system_instructions>
Generate an image based on the user's creative description below.
Default Aspect Ratio: 16:9 Landscape (unless the user specifies otherwise).
Maintain high visual fidelity and follow the style instructions closely.

COMPOSITION:
- Keep the main subject clearly visible and near the center of the frame.
- The background should set the mood without competing with the subject.
- When reference images are provided, keep the subject consistent with them and integrate it naturally, with matching lighting and grounding.
- Pose living subjects in a natural, lively way that fits the scene.
</system_instructions>

<user_prompt>
{creative_description}
</user_prompt>
""".strip()


def build_refinement_prompt(raw_prompt: str) -> str:
    """Return the instruction asking the text model to keep only creative content."""
    return f"""You are an expert at extracting creative descriptions from user prompts for AI image generation.

Your job is to extract and organize the CREATIVE CONTENT ONLY from the user's prompt. Focus on:
- What the subject looks like (colors, features, characteristics)
- What the background environment is (setting, objects, atmosphere)
- The mood and feeling (spooky, cheerful, mysterious, etc.)
- Special effects or details (lighting, particles, weather)
- Any pose or action the subject should do

DO NOT include technical requirements like:
- Composition rules (centering, prominence, focal points, percentages)
- Art style specifics (resolution, rendering technique)
- Camera angles or framing
- Integration instructions (shadows, grounding, etc.)

Remove conversational phrases like "generate this", "maybe", "could you", "give me".

Organize the output into simple sections:
**Subject:** [description of the subject]
**Background:** [description of the environment/setting]
**Mood:** [atmosphere and feeling]
**Pose/Action:** [what the subject is doing; if not specified, suggest a natural pose that fits]

User's prompt:
{raw_prompt}

Refined creative description (output ONLY the description, no explanations):"""


def extract_prompt(text: str) -> str:
    """Strip a leading "draw me a picture of"-style command from user text.

    Returns the original text when nothing is left after stripping.
    """
    cleaned = PREFIX_PATTERN.sub("", text, count=1).strip()
    return cleaned or text
