"""Prompt text handed to an external chat assistant."""

from .models import Item

QA_EXAMPLE_COUNT = 2


def build_qa_prompt(item: Item, question: str) -> str:
    """Question about an entry, with its meaning and first example sentences."""
    examples = item.sentences[:QA_EXAMPLE_COUNT]
    if examples:
        example_lines = '\n'.join(f'{n}) {s.en or ""} / {s.ja or ""}'
                                  for n, s in enumerate(examples, start=1))
    else:
        example_lines = '(none)'
    return (
        "[Wordloom Q&A]\n"
        f"Entry: {item.word}\n"
        f"Type: {item.entry_type}\n"
        f"Meaning(JP): {item.meaning}\n"
        "\n"
        f"Examples:\n{example_lines}\n"
        "\n"
        "My question:\n"
        f"{(question or '').strip() or '(no question)'}"
    )


def build_writing_prompt(item: Item, draft: str) -> str:
    """Correction request for a one-sentence draft using the target entry."""
    return (
        "[Wordloom Writing]\n"
        f"Target: {item.word} ({item.entry_type})\n"
        f"Meaning(JP): {item.meaning}\n"
        "\n"
        "Task:\n"
        "Write ONE natural sentence about my day using the target.\n"
        "- If phrase, use the exact phrase (inflections OK if needed).\n"
        "- Keep it natural, not textbook.\n"
        "\n"
        "My draft:\n"
        f"{(draft or '').strip() or '(empty)'}\n"
        "\n"
        "Return in this format:\n"
        "1) Corrected\n"
        "2) Why\n"
        "3) Alternative\n"
        "4) Vocabulary note\n"
        "5) One drill"
    )
