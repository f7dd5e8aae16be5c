"""Gemini implementations of the word generator and the review recommender."""

import logging
import time
import google.generativeai as genai
from pydantic import ValidationError

from core.config import SOURCE_LANGUAGE, TARGET_LANGUAGE, RECOMMENDER_BATCH_SIZE
from core.errors import GenerationFailed, GeneratorUnavailable
from core.interfaces import WordGenerator, Recommender
from core.models import TranslationDirection, WordPair
from core.utils import extract_json

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    'fr': 'French',
    'it': 'Italian',
    'en': 'English',
    'es': 'Spanish',
    'de': 'German'
}


class GeminiClient:
    """Shared Gemini plumbing: one stateless request per call."""

    def __init__(self, api_key: str, model_name: str = 'gemini-2.0-flash'):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)
        self.model_name = model_name

    def _execute(self, prompt: str) -> tuple[str, int]:
        start_time = time.time()
        response = self.model.generate_content(prompt)
        end_time = time.time()
        ms = int((end_time - start_time) * 1000)
        return (response.text, ms)


class GeminiWordGenerator(GeminiClient, WordGenerator):
    """Generates word pairs about a topic with Gemini."""

    def __init__(self, api_key: str, model_name: str = 'gemini-2.0-flash',
                 source_lang: str = SOURCE_LANGUAGE, target_lang: str = TARGET_LANGUAGE):
        super().__init__(api_key, model_name)
        self.source_lang = source_lang
        self.target_lang = target_lang

    def _build_prompt(self, topic: str, category: str | None, count: int,
                      context_words: list[WordPair], exclude_words: list[str],
                      direction: TranslationDirection) -> str:
        source = LANGUAGE_NAMES.get(self.source_lang, self.source_lang)
        target = LANGUAGE_NAMES.get(self.target_lang, self.target_lang)
        direction_note = (
            f"The learner translates from {source} into {target}."
            if direction == TranslationDirection.SOURCE_TO_TARGET
            else f"The learner translates from {target} into {source}."
        )

        if category == 'conjugation':
            task = f"""
            Generate {count} {source} conjugated verbs with their {target} translation to practise the "{topic}" tense.
            Vary the grammatical person. The {target} translation must include the subject pronoun
            (e.g. "mangio" -> "je mange"). Use the masculine form for the third person.
            "context" is an example sentence using the verb in the "{topic}" tense.
            """
        else:
            task = f"""
            Generate {count} {source} words with their {target} translation on the theme: "{topic}".
            "sourceWord" and "targetWord" must contain only the translation of each other.
            "context" is a short example sentence or usage note (optional).
            """

        if context_words:
            known = ', '.join(f"{p.source_word} ({p.target_word})" for p in context_words)
            context_note = f"The session also reviews these words; do not repeat them, but you may pick related vocabulary: {known}"
        else:
            context_note = ''
        avoided = ', '.join(exclude_words) if exclude_words else 'none'

        return f"""
            {task}
            {direction_note}
            {context_note}
            Do NOT include any of these {source} words: {avoided}

            Return ONLY a JSON array of exactly {count} objects with this structure:
            [
                {{"sourceWord": "{source} word", "targetWord": "{target} translation", "context": "example"}}
            ]
            No text before or after the JSON.
        """

    def generate(self, topic: str, category: str | None, count: int,
                 context_words: list[WordPair], exclude_words: list[str],
                 direction: TranslationDirection) -> list[WordPair]:
        prompt = self._build_prompt(topic, category, count, context_words, exclude_words, direction)
        try:
            response, ms = self._execute(prompt)
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise GenerationFailed(f"Gemini request failed: {e}", requested=count) from e

        try:
            data = extract_json(response)
            if not isinstance(data, list):
                raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
            pairs = [WordPair.from_dict(item) for item in data]
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to parse word pairs: {e}")
            logger.error(f"Raw response:\n{response}")
            raise GenerationFailed(f"Invalid word pair response: {e}", requested=count) from e

        logger.info(f"Generated {len(pairs)} word pairs for '{topic}' in {ms}ms")
        return pairs


class GeminiRecommender(GeminiClient, Recommender):
    """Ranks review candidates with Gemini."""

    def _build_prompt(self, candidates: list[dict]) -> str:
        lines = '\n'.join(
            f"- id={c['id']} word={c['word']} translation={c['translation']} "
            f"lastReviewed={c['lastReviewed']} masteryLevel={c['masteryLevel']} "
            f"timesReviewed={c['timesReviewed']}"
            for c in candidates
        )
        return f"""
            You schedule vocabulary reviews for a language learner.
            Candidate words:
            {lines}

            Choose the {RECOMMENDER_BATCH_SIZE} words the learner should review now.
            Prioritise words with a low masteryLevel and words reviewed a while ago,
            but not only the very oldest ones. Words reviewed very recently can wait.

            Return ONLY a JSON array of exactly {RECOMMENDER_BATCH_SIZE} ids, highest priority first:
            ["id1", "id2", ...]
        """

    def rank(self, candidates: list[dict]) -> list[str]:
        try:
            response, ms = self._execute(self._build_prompt(candidates))
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise GeneratorUnavailable(f"Gemini request failed: {e}") from e

        known = {c['id'] for c in candidates}
        try:
            data = extract_json(response)
        except ValueError as e:
            logger.error(f"Failed to parse ranking: {e}")
            logger.error(f"Raw response:\n{response}")
            raise GeneratorUnavailable(f"Invalid ranking response: {e}") from e

        ids = []
        if isinstance(data, list):
            for item in data:
                if isinstance(item, str) and item in known and item not in ids:
                    ids.append(item)
        if len(ids) != RECOMMENDER_BATCH_SIZE:
            logger.warning(f"Ranking returned {len(ids)} usable ids, expected {RECOMMENDER_BATCH_SIZE}")
            logger.warning(f"Raw response:\n{response}")
            raise GeneratorUnavailable(f"Expected {RECOMMENDER_BATCH_SIZE} ranked ids, got {len(ids)}")

        logger.info(f"Ranked {len(candidates)} candidates in {ms}ms")
        return ids
