"""
Review ranking.

Turns an admin's free-text review into a (label, value) pair by asking the
language model to pick one name from the ranking vocabulary.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .errors import ConfigError
from .models import (
    NEUTRAL_RANKING_NAME,
    NEUTRAL_RANKING_VALUE,
    NOT_RANKED_NAME,
    UNRANKED_VALUE,
    Ranking,
    ReviewResult,
)
from .utils import setup_logger

logger = setup_logger("ranking")

DEFAULT_RANKINGS = [
    Ranking("Excellent", 1),
    Ranking("Good", 2),
    Ranking("Okay", 3),
    Ranking("Bad", 4),
    Ranking("Terrible", 5),
    Ranking(NOT_RANKED_NAME, NEUTRAL_RANKING_VALUE),
]


@dataclass(frozen=True)
class RankingVocabulary:
    """Read-only set of ranking names the model may answer with."""

    rankings: Tuple[Ranking, ...]

    @classmethod
    def load(cls, db) -> "RankingVocabulary":
        """Load the vocabulary from the rankings collection."""
        rankings = tuple(db.get_rankings())
        logger.info(f"Loaded {len(rankings)} rankings")
        return cls(rankings)

    @classmethod
    def of(cls, rankings: Iterable[Ranking]) -> "RankingVocabulary":
        return cls(tuple(rankings))

    def prompt_terms(self) -> str:
        """Space-joined names of every non-neutral ranking."""
        return build_vocabulary(self.rankings)

    def match(self, label: str) -> Optional[Ranking]:
        """First ranking whose name equals the label, ignoring case."""
        wanted = label.casefold()
        for ranking in self.rankings:
            if ranking.ranking_name.casefold() == wanted:
                return ranking
        return None


def build_vocabulary(rankings: Iterable[Ranking]) -> str:
    names = [r.ranking_name for r in rankings if r.ranking_value != NEUTRAL_RANKING_VALUE]
    return " ".join(names).strip()


def render_review_prompt(template: str, vocabulary: RankingVocabulary, admin_review: str) -> str:
    """Fill ``{review_sentiment}`` and ``{admin_review}`` into the template."""
    if not template:
        raise ConfigError("BASE_PROMPT_TEMPLATE not set")
    prompt = template.replace("{review_sentiment}", vocabulary.prompt_terms())
    return prompt.replace("{admin_review}", admin_review)


def interpret_response(response: str, vocabulary: RankingVocabulary) -> Tuple[str, int]:
    """
    Map a model response onto the vocabulary.

    "Neutral" in any case maps to the neutral sentinel. A vocabulary name
    maps to its stored name and value. Anything else is kept verbatim with
    value 0.
    """
    label = response.strip()
    if label.casefold() == NEUTRAL_RANKING_NAME.casefold():
        return NEUTRAL_RANKING_NAME, NEUTRAL_RANKING_VALUE

    ranking = vocabulary.match(label)
    if ranking is not None:
        return ranking.ranking_name, ranking.ranking_value

    logger.warning(f"Model answered outside the vocabulary: {label!r}")
    return label, UNRANKED_VALUE


def classify_review(
    admin_review: str,
    vocabulary: RankingVocabulary,
    llm,
    template: str,
    timeout: float = 30.0,
) -> ReviewResult:
    """
    Classify a review with one model call.

    Raises:
        ConfigError: If the prompt template is not configured
        UpstreamError: If the model call fails
    """
    prompt = render_review_prompt(template, vocabulary, admin_review)
    response = llm.complete(prompt, timeout=timeout)
    name, value = interpret_response(response, vocabulary)
    return ReviewResult(ranking_name=name, ranking_value=value, admin_review=admin_review)
