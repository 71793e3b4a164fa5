"""Standard memory-bank files written when a project is initialized."""

_FOOTER = "Refer to the Memory Bank methodology documentation for details."


def _template(title: str, purpose: str, prompt: str) -> str:
    return (
        f"# {title}\n\n"
        "**(Auto-generated when the project was initialized)**\n\n"
        f"**Purpose:** {purpose} {_FOOTER}\n\n"
        "---\n"
        f"*(Start adding your {prompt} below)*\n"
    )


STANDARD_FILES: dict[str, str] = {
    "projectbrief.md": _template(
        "Project Brief",
        "Define the high-level goals, core problem, proposed solution, and scope "
        "of this project. This is the foundational document.",
        "project brief content",
    ),
    "productContext.md": _template(
        "Product Context",
        "Explain *why* this project exists, the specific problems it solves for "
        "users, how it *should* work from a user perspective, and the desired "
        "user experience goals.",
        "product context",
    ),
    "activeContext.md": _template(
        "Active Context",
        "Track the *current* state of the project. What is the immediate focus? "
        "What changed recently? What are the next steps? This file should be "
        "updated frequently.",
        "active context",
    ),
    "systemPatterns.md": _template(
        "System Patterns",
        "Document the technical architecture, key technical decisions, design "
        "patterns used, component relationships, and critical implementation paths.",
        "system patterns",
    ),
    "techContext.md": _template(
        "Tech Context",
        "List the specific technologies, libraries, frameworks, and tools used in "
        "the project, including development setup and technical constraints.",
        "tech context",
    ),
    "progress.md": _template(
        "Progress",
        "Track the overall progress and evolution of the project: what works, "
        "what is left to build, known issues, and how key decisions evolved.",
        "progress tracking",
    ),
}
