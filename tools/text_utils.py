"""English text utilities: tokenizing, lemmas, names, sentiment, themes."""

import re
from typing import Optional

from tools.lexicon import (
    ADJECTIVES,
    CALENDAR_WORDS,
    E_RESTORE_STEMS,
    IRREGULAR_LEMMAS,
    NEGATIVE_WORDS,
    NEGATORS,
    POSITIVE_WORDS,
    STOPWORDS,
)

_WORD_RE = re.compile(r"[A-Za-z]+(?:'[A-Za-z]+)*")
# ':' and ';' also end a clause: "Subject: Math" starts a new one at "Math".
_SENTENCE_SPLIT_RE = re.compile(r"[.!?:;\n]+")
_VOWELS = set("aeiouy")

# How far back a negator still flips a sentiment word ("not very happy").
NEGATION_WINDOW = 3


def _normalize(text: str) -> str:
    return text.replace("’", "'").replace("‘", "'")


def _strip_possessive(word: str) -> str:
    if word.lower().endswith("'s"):
        return word[:-2]
    return word


def split_sentences(text: str) -> list[str]:
    """Split text into sentence-like clauses."""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(_normalize(text)) if s.strip()]


def split_into_paragraphs(text: str) -> list[str]:
    """Split text into paragraphs."""
    paragraphs = re.split(r"\n\s*\n|\n", text)
    return [p.strip() for p in paragraphs if p.strip()]


def tokenize_words(text: str) -> list[str]:
    """Word tokens in original case. Contractions stay whole ("didn't")."""
    return _WORD_RE.findall(_normalize(text))


def count_words(text: str) -> int:
    return len(tokenize_words(text))


def is_negator(word: str) -> bool:
    lowered = word.lower()
    return lowered in NEGATORS or lowered.endswith("n't")


def lemmatize(word: str) -> str:
    """Reduce an English word to a dictionary-like base form.

    Suffix rules cover regular plurals and -ing/-ed forms; the irregular
    table and silent-e stems catch the common cases the rules get wrong.
    """
    w = _strip_possessive(word).lower()
    if w in IRREGULAR_LEMMAS:
        return IRREGULAR_LEMMAS[w]
    if len(w) <= 3:
        return w
    if w.endswith("ies") and len(w) > 4:
        return w[:-3] + "y"
    if w.endswith(("sses", "shes", "ches", "xes", "zes")):
        return w[:-2]
    if w.endswith("s") and not w.endswith(("ss", "us", "is")):
        return w[:-1]
    if w.endswith("ing") and len(w) > 5 and _has_vowel(w[:-3]):
        return _restore_stem(w[:-3])
    if w.endswith("ied") and len(w) > 4:
        return w[:-3] + "y"
    if w.endswith("ed") and not w.endswith("eed") and len(w) > 4 and _has_vowel(w[:-2]):
        return _restore_stem(w[:-2])
    return w


def _has_vowel(stem: str) -> bool:
    return any(c in _VOWELS for c in stem)


def _restore_stem(stem: str) -> str:
    if stem in E_RESTORE_STEMS:
        return stem + "e"
    # running -> runn -> run; falling / missing / buzzing keep their double letter
    if len(stem) >= 3 and stem[-1] == stem[-2] and stem[-1] not in "lsz":
        return stem[:-1]
    return stem


def is_content_word(word: str) -> bool:
    """True for words that can carry a theme (nouns and verbs, roughly)."""
    lowered = _strip_possessive(word).lower()
    if "'" in lowered or len(lowered) <= 2:
        return False
    if lowered in STOPWORDS or lowered in ADJECTIVES or lowered in NEGATORS:
        return False
    if lowered.endswith("ly") and len(lowered) > 4:
        return False
    return True


def extract_themes(text: str, limit: int = 5) -> list[str]:
    """Most frequent content lemmas, ties broken by first appearance."""
    counts: dict[str, int] = {}
    for token in tokenize_words(text):
        if not is_content_word(token):
            continue
        lemma = lemmatize(token)
        if len(lemma) <= 2 or lemma in STOPWORDS or lemma in ADJECTIVES:
            continue
        counts[lemma] = counts.get(lemma, 0) + 1
    # sorted() is stable, so equal counts keep dict (first-seen) order
    ranked = sorted(counts, key=lambda lemma: -counts[lemma])
    return ranked[:limit]


def _is_name_token(word: str) -> bool:
    if not word[0].isupper():
        return False
    lowered = word.lower()
    return lowered not in STOPWORDS and lowered not in CALENDAR_WORDS


def extract_entities(text: str) -> list[str]:
    """Personal, place and organization names, in order of appearance.

    A name is a run of adjacent capitalized words. A single capitalized
    word opening a sentence only counts when the same word also shows up
    capitalized mid-sentence somewhere in the text.
    """
    runs: list[tuple[bool, list[str]]] = []
    mid_sentence_caps: set[str] = set()

    for sentence in split_sentences(text):
        current: list[str] = []
        current_at_start = False
        last_end: Optional[int] = None
        for index, match in enumerate(_WORD_RE.finditer(sentence)):
            word = _strip_possessive(match.group())
            adjacent = last_end is not None and sentence[last_end:match.start()].isspace()
            if word and _is_name_token(word):
                if index > 0:
                    mid_sentence_caps.add(word)
                if current and adjacent:
                    current.append(word)
                else:
                    if current:
                        runs.append((current_at_start, current))
                    current = [word]
                    current_at_start = index == 0
            elif current:
                runs.append((current_at_start, current))
                current = []
            last_end = match.end()
            if match.group() != word:
                # possessive closes the run: "Maya's dog"
                if current:
                    runs.append((current_at_start, current))
                current = []
        if current:
            runs.append((current_at_start, current))

    entities: list[str] = []
    for at_start, words in runs:
        if at_start and len(words) == 1 and words[0] not in mid_sentence_caps:
            continue
        name = " ".join(words)
        if name not in entities:
            entities.append(name)
    return entities


def score_sentiment(text: str) -> Optional[float]:
    """Mean polarity of sentiment words in [-1.0, 1.0], or None if none found.

    A negator within NEGATION_WINDOW words before a sentiment word flips it.
    """
    total = 0.0
    scored = 0
    for sentence in split_sentences(text):
        tokens = [t.lower() for t in tokenize_words(sentence)]
        for i, token in enumerate(tokens):
            lemma = lemmatize(token)
            if token in POSITIVE_WORDS or lemma in POSITIVE_WORDS:
                polarity = 1.0
            elif token in NEGATIVE_WORDS or lemma in NEGATIVE_WORDS:
                polarity = -1.0
            else:
                continue
            window = tokens[max(0, i - NEGATION_WINDOW):i]
            if any(is_negator(w) for w in window):
                polarity = -polarity
            total += polarity
            scored += 1
    if scored == 0:
        return None
    return max(-1.0, min(1.0, round(total / scored, 4)))
