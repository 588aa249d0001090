from study_assistant.schemas.generation import (
    ContentKind,
    GenerationRequest,
    SummaryFormat,
    SummaryLength,
    SummaryOptions,
)
from .base import ContentGenerator, with_instructions

LENGTH_INSTRUCTIONS = {
    SummaryLength.BRIEF: "Create a brief summary focusing on critical points (1-2 pages).",
    SummaryLength.STANDARD: "Create a balanced summary of key concepts (2-3 pages).",
    SummaryLength.DETAILED: "Create a comprehensive summary covering all concepts (4-6 pages).",
}

FORMAT_INSTRUCTIONS = {
    SummaryFormat.BULLETS: "Use bullet points organized under clear headings.",
    SummaryFormat.PARAGRAPHS: "Use well-structured paragraphs with clear topic sentences.",
    SummaryFormat.OUTLINE: "Use a hierarchical outline format with numbered sections and subsections.",
}


class SummaryGenerator(ContentGenerator):
    kind = ContentKind.SUMMARY
    temperature = 0.5
    title_prefix = "Summary"

    def build_system_prompt(self, request: GenerationRequest) -> str:
        options: SummaryOptions = request.options
        return (
            "You are an educational assistant that creates summaries of study materials.\n"
            "Create a clear, structured summary in Swedish that captures the key concepts and important details.\n"
            f"{FORMAT_INSTRUCTIONS[options.format]}\n"
            f"{LENGTH_INSTRUCTIONS[options.length]}\n"
            "Focus on what students need to know for studying and test preparation."
        )

    def build_user_prompt(self, request: GenerationRequest, material: str) -> str:
        return with_instructions(
            f"Create a summary of the following study material:\n\n{material}",
            request.teacher_instructions,
        )
