"""Script detection and query normalisation helpers."""

import jaconv


def is_hiragana(char: str) -> bool:
    """Check if a character is hiragana."""
    return '\u3040' <= char <= '\u309f'


def is_katakana(char: str) -> bool:
    """Check if a character is katakana (including half-width forms)."""
    return '\u30a0' <= char <= '\u30ff' or '\u31f0' <= char <= '\u31ff' or '\uff66' <= char <= '\uff9f'


def is_han(char: str) -> bool:
    """Check if a character is a CJK ideograph."""
    return (
        '\u4e00' <= char <= '\u9fff'  # CJK Unified Ideographs
        or '\u3400' <= char <= '\u4dbf'  # Extension A
        or '\uf900' <= char <= '\ufaff'  # Compatibility Ideographs
        or '\U00020000' <= char <= '\U0002ebef'
        or char in '\u3005\u3006\u3007'  # 々 〆 〇
    )


def is_japanese_char(char: str) -> bool:
    return is_hiragana(char) or is_katakana(char) or is_han(char)


def contains_japanese(text: str) -> bool:
    """True if the text has any hiragana, katakana or Han character."""
    return any(is_japanese_char(c) for c in text)


def normalize_query(query: str) -> str:
    """Strip whitespace and widen half-width katakana (ｶﾞｯｺｳ -> ガッコウ)."""
    return jaconv.h2z(query.strip(), kana=True, ascii=False, digit=False)
