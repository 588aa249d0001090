from study_assistant.schemas.generation import (
    ContentKind,
    GenerationRequest,
    PracticeTestOptions,
    QuestionType,
)
from .base import ContentGenerator, with_instructions

QUESTION_TYPE_NAMES = {
    QuestionType.MULTIPLE_CHOICE: "multiple choice",
    QuestionType.TRUE_FALSE: "true/false",
    QuestionType.SHORT_ANSWER: "short answer",
    QuestionType.ESSAY: "essay",
}


def question_type_instruction(question_types) -> str:
    selected = [t for t in QuestionType if t in set(question_types) and t != QuestionType.MIXED]
    if not selected or QuestionType.MIXED in set(question_types):
        return "Include a mix of question types (multiple choice, true/false, short answer)."
    return f"Use only these question types: {', '.join(QUESTION_TYPE_NAMES[t] for t in selected)}."


class PracticeTestGenerator(ContentGenerator):
    """Practice tests are stored as raw markdown; the renderer recovers structure."""

    kind = ContentKind.PRACTICE_TEST
    temperature = 0.7
    title_prefix = "Practice Test"

    def build_system_prompt(self, request: GenerationRequest) -> str:
        options: PracticeTestOptions = request.options
        if options.include_explanations:
            answer_key = "Include detailed explanations for each answer in the answer key."
        else:
            answer_key = "Provide an answer key without explanations, only the correct answers."
        return (
            "You are an educational assistant that creates practice tests from study materials.\n"
            "Create a practice test in Swedish. Make the questions challenging but fair, "
            "covering the key concepts from the material.\n"
            f"{question_type_instruction(options.question_types)}\n"
            "Format your response as markdown. Number every question as '1.', '2.' and so on, "
            "and put multiple choice options on their own lines as 'A)', 'B)', 'C)', 'D)'.\n"
            "End with the answer key under a heading named 'Facit'.\n"
            f"{answer_key}"
        )

    def build_user_prompt(self, request: GenerationRequest, material: str) -> str:
        options: PracticeTestOptions = request.options
        if options.count is None:
            header = (
                "Create a practice test from the following study material. "
                "Let the model decide how many questions are appropriate for the material:"
            )
        else:
            header = f"Create a practice test with exactly {options.count} questions from the following study material:"
        return with_instructions(f"{header}\n\n{material}", request.teacher_instructions)
