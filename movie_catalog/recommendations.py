"""
Movie recommendations.

Two strategies share the user's favourite genres as input:
- catalog: movies from the store sharing a genre, best ranked first
- ai: movies suggested by the language model, parsed from a JSON array
"""

import json
from typing import List

from .database import new_object_id
from .errors import ConfigError, UpstreamParseError
from .utils import setup_logger

logger = setup_logger("recommendations")

FENCE = "```"


def recommend_from_catalog(db, user_id: str, limit: int) -> List[dict]:
    """Catalog movies in the user's favourite genres, ascending by ranking value."""
    genres = db.get_favourite_genres(user_id)
    if not genres:
        return []
    return db.get_movies_by_genres(genres, limit)


def render_recommendation_prompt(template: str, genres: List[str], limit: int) -> str:
    """Fill ``{genres}`` and ``{limit}`` into the template."""
    if not template:
        raise ConfigError("RECOMMENDATION_PROMPT_TEMPLATE not set")
    prompt = template.replace("{genres}", ", ".join(genres))
    return prompt.replace("{limit}", str(limit))


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json / ``` marker and a trailing ``` marker."""
    cleaned = text.strip()
    if cleaned.startswith(FENCE + "json"):
        cleaned = cleaned[len(FENCE + "json"):]
    elif cleaned.startswith(FENCE):
        cleaned = cleaned[len(FENCE):]
    if cleaned.endswith(FENCE):
        cleaned = cleaned[: -len(FENCE)]
    return cleaned.strip()


def parse_movie_list(response: str) -> List[dict]:
    """
    Parse a model response into a list of movie objects.

    Tries the whole (fence-stripped) response first, then the substring
    between the first ``[`` and the last ``]``.

    Raises:
        UpstreamParseError: If neither attempt yields a JSON array of objects.
    """
    cleaned = strip_code_fence(response)
    try:
        return _as_movie_list(json.loads(cleaned))
    except (ValueError, TypeError) as first_error:
        start = cleaned.find("[")
        end = cleaned.rfind("]")
        if start == -1 or end <= start:
            raise UpstreamParseError(
                f"Error parsing AI response: {first_error}", raw_response=response
            )
        try:
            return _as_movie_list(json.loads(cleaned[start:end + 1]))
        except (ValueError, TypeError) as e:
            raise UpstreamParseError(f"Error parsing AI response: {e}", raw_response=response)


def _as_movie_list(value) -> List[dict]:
    if not isinstance(value, list) or not all(isinstance(m, dict) for m in value):
        raise TypeError("expected a JSON array of movie objects")
    return value


def recommend_with_ai(
    llm,
    genres: List[str],
    template: str,
    limit: int,
    timeout: float = 60.0,
) -> List[dict]:
    """
    Ask the model for movies in the given genres.

    Every returned movie gets a fresh id; results are not merged with the
    catalog.
    """
    prompt = render_recommendation_prompt(template, genres, limit)
    response = llm.complete(prompt, timeout=timeout)
    movies = parse_movie_list(response)

    for movie in movies:
        movie["id"] = new_object_id()

    logger.info(f"AI recommended {len(movies)} movies for genres={genres}")
    return movies
