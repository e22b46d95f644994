"""English-side helpers for meaning search."""

from lemminflect import getAllLemmas


def query_lemmas(text: str) -> list[str]:
    """
    Dictionary forms of a single English query word.

    "running" -> ["run"], "mice" -> ["mouse"]. Multi-word queries and
    words lemminflect doesn't know return an empty list; the query itself
    is never included.
    """
    word = text.strip().lower()
    if not word or " " in word:
        return []

    lemmas: list[str] = []
    # getAllLemmas returns {upos: (lemma, ...)}
    for forms in getAllLemmas(word).values():
        for lemma in forms:
            lemma = lemma.lower()
            if lemma != word and lemma not in lemmas:
                lemmas.append(lemma)
    return lemmas
