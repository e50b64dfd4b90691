from opponent.core.evaluator import CHECKMATE_SCORE


def describe_score(score: int) -> str:
    """'mate white', 'mate black' or 'cp <n>' for logs and API responses."""
    if score >= CHECKMATE_SCORE:
        return "mate white"
    if score <= -CHECKMATE_SCORE:
        return "mate black"
    return f"cp {score}"
