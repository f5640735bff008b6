PLACEHOLDER = "_____"
FULL_RECALL_PROMPT = "Reconstruct the full text from memory."


def mask(reference_text: str, percentage: int) -> str:
    """
    Blank out roughly `percentage` % of the words of `reference_text`.

    Every word whose 1-based position is a multiple of 100 // percentage is
    replaced. 0 shows the text as is; 100 hides it entirely.
    Words are split on single spaces only, so the text's own spacing and
    punctuation are kept.
    """
    if percentage == 0:
        return reference_text
    if percentage == 100:
        return FULL_RECALL_PROMPT

    stride = 100 // percentage
    words = reference_text.split(" ")
    return " ".join(
        PLACEHOLDER if (i + 1) % stride == 0 else w
        for i, w in enumerate(words)
    )


def count_masked(reference_text: str, percentage: int) -> int:
    if percentage in (0, 100):
        return 0
    n_words = len(reference_text.split(" "))
    return n_words // (100 // percentage)
