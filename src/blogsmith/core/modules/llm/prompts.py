from blogsmith.core.modules.llm.models import BlogType

SYSTEM_PROMPT = (
    "You are a professional content strategist and SEO expert. "
    "Generate compelling blog titles that are optimized for search engines and user engagement."
)

TITLE_COUNT = 5

_TYPE_INSTRUCTIONS: dict[str, str] = {
    BlogType.LISTICLE: "Generate titles suitable for a numbered listicle blog post.",
    BlogType.HOW_TO: "Generate titles suitable for a step-by-step how-to blog post.",
    BlogType.CASE_STUDY: "Generate titles suitable for a real-world case study blog post.",
    BlogType.SOLUTION_BASED: "Generate titles suitable for a problem-solving, solution-based blog post.",
}

_DEFAULT_INSTRUCTION = "Generate titles suitable for an educational and comprehensive informative blog post."


def blog_type_instruction(blog_type: str | None) -> str:
    """Instruction for the blog type; unknown types fall back to informative."""
    return _TYPE_INSTRUCTIONS.get(blog_type or "", _DEFAULT_INSTRUCTION)


def build_title_prompt(keywords: list[str], blog_type: str | None) -> str:
    return f"""Generate {TITLE_COUNT} engaging, SEO-friendly blog titles for a {blog_type or BlogType.INFORMATIVE} blog post using these keywords: {", ".join(keywords)}. {blog_type_instruction(blog_type)}

Requirements:
- Each title should be compelling and click-worthy
- Include the main keywords naturally
- Keep titles under 60 characters
- Return only the titles, one per line"""
