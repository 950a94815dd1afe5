import json

from prompt_parts import FIELDS, PromptParts, field_label

NEGATIVE_PROMPT = (
    "blurry, low quality, lowres, jpeg artifacts, watermark, signature, logo, "
    "text, deformed, bad anatomy, extra limbs, extra fingers, mutated hands, "
    "disfigured face, cartoon, painting, illustration, oversaturated"
)

QUALITY_TAGS = ("ultra realistic", "high detail", "8k")


def build_final_document(parts: PromptParts) -> dict | None:
    """Build the ``{"prompt", "negative_prompt"}`` document, or ``None`` without a subject."""
    if not parts.has_subject:
        return None

    style = f"style of {parts.camera}" if parts.camera.strip() else ""
    segments = [parts.subject, parts.pose, parts.background, style, *QUALITY_TAGS]
    prompt = ", ".join(s for s in segments if s.strip())
    return {"prompt": prompt, "negative_prompt": NEGATIVE_PROMPT}


def assemble_final(parts: PromptParts) -> str:
    document = build_final_document(parts)
    if document is None:
        return ""
    return json.dumps(document, indent=2, ensure_ascii=False)


def combined_text(parts: PromptParts) -> str:
    if not parts.has_subject:
        return ""
    return "\n\n".join(f"{field_label(name)}:\n{getattr(parts, name)}" for name in FIELDS)
