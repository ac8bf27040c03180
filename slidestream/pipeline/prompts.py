from slidestream.schema import PresentationPlan, SlideSpec, SlideType


def clip(content: str, limit: int) -> str:
    """Return at most ``limit`` characters of ``content``."""
    if limit <= 0 or len(content) <= limit:
        return content
    return content[:limit]


def build_plan_prompt(content: str, limit: int) -> str:
    types = ", ".join(slide_type.value for slide_type in SlideType)
    return (
        "You are an expert presentation designer. Read the source content below and plan a "
        "clear, well-structured slide deck that teaches its key ideas.\n\n"
        "Return ONLY a single JSON object with this exact shape:\n"
        "{\n"
        '  "title": "Presentation title",\n'
        '  "subtitle": "Optional subtitle",\n'
        '  "targetAudience": "Who the deck is for",\n'
        '  "estimatedSlides": 6,\n'
        '  "slides": [\n'
        '    {"type": "opening", "focus": "One line describing what this slide covers", "points": 3}\n'
        "  ]\n"
        "}\n\n"
        "Rules:\n"
        f"- Each slide type must be one of: {types}.\n"
        "- Start with an opening slide and end with a summary or closing slide.\n"
        "- Plan between 5 and 10 slides; order them in the sequence they should be presented.\n"
        "- \"points\" is the number of bullet points the slide should have (2 to 5).\n"
        "- Each focus must name specific ideas from the content, not generic headings.\n\n"
        f"Content:\n{clip(content, limit)}"
    )


def build_slide_prompt(
    plan: PresentationPlan,
    spec: SlideSpec,
    index: int,
    content: str,
    limit: int,
) -> str:
    return (
        f'You are writing slide {index + 1} of {len(plan.slides)} for the presentation "{plan.title}".\n\n'
        f"Slide type: {spec.type.value}\n"
        f"Slide focus: {spec.focus}\n"
        f"Number of bullet points: {spec.points}\n\n"
        "Return ONLY a single JSON object with this exact shape:\n"
        "{\n"
        '  "title": "Slide title",\n'
        '  "bullets": ["First point", "Second point"],\n'
        '  "speakerNotes": "What the presenter should say"\n'
        "}\n\n"
        "Rules:\n"
        "- The title has at most 8 words.\n"
        f"- Write exactly {spec.points} bullets.\n"
        "- Each bullet is a complete thought of 10 to 15 words.\n"
        "- Use concrete facts, names and examples from the source content, never generic filler.\n"
        "- Speaker notes are one to two sentences.\n\n"
        f"Source content:\n{clip(content, limit)}"
    )


COVER_IMAGE_TEMPLATE = (
    "Presentation cover art for \"{title}\". Bold, modern composition with a clear focal "
    "subject, soft gradient background, cinematic lighting, no text."
)

CONCEPT_IMAGE_TEMPLATE = (
    "Illustrate the concept \"{title}\". Educational illustration, clean minimalist style, no text."
)


def build_image_prompt(slide_type: SlideType, title: str) -> str:
    template = COVER_IMAGE_TEMPLATE if slide_type is SlideType.OPENING else CONCEPT_IMAGE_TEMPLATE
    return template.format(title=title)
