"""
Порядковые подписи дней Рамадана:
  bn full  → "প্রথম রোজা"
  bn short → "১ম রমযান"
  en       → "Day 1"
"""

BENGALI_ORDINALS = {
    1: "প্রথম", 2: "দ্বিতীয়", 3: "তৃতীয়", 4: "চতুর্থ", 5: "পঞ্চম",
    6: "ষষ্ঠ", 7: "সপ্তম", 8: "অষ্টম", 9: "নবম", 10: "দশম",
    11: "একাদশ", 12: "দ্বাদশ", 13: "ত্রয়োদশ", 14: "চতুর্দশ", 15: "পঞ্চদশ",
    16: "ষোড়শ", 17: "সপ্তদশ", 18: "অষ্টাদশ", 19: "ঊনবিংশ", 20: "বিংশ",
    21: "একবিংশ", 22: "দ্বাবিংশ", 23: "ত্রয়োবিংশ", 24: "চতুর্বিংশ", 25: "পঞ্চবিংশ",
    26: "ষড়বিংশ", 27: "সপ্তবিংশ", 28: "অষ্টাবিংশ", 29: "ঊনত্রিংশ", 30: "ত্রিংশ",
}

BENGALI_DIGITS = str.maketrans("0123456789", "০১২৩৪৫৬৭৮৯")

# ১ম, ২য়, ৩য়, ৪র্থ, ৫ম ... ১০ম, дальше তম
_NUMERIC_SUFFIXES = {1: "ম", 2: "য়", 3: "য়", 4: "র্থ", 6: "ষ্ঠ"}


def _bengali_numeric_ordinal(day: int) -> str:
    if day <= 10:
        suffix = _NUMERIC_SUFFIXES.get(day, "ম")
    else:
        suffix = "তম"
    return str(day).translate(BENGALI_DIGITS) + suffix


def get_ramadan_day_ordinal(day: int, locale: str = "bn", style: str = "short") -> str:
    """Только порядковая часть ("প্রথম" / "১ম" / "1")."""
    if day < 1 or day > 30:
        return str(day)
    if locale == "bn":
        if style == "full":
            return BENGALI_ORDINALS[day]
        return _bengali_numeric_ordinal(day)
    return str(day)


def format_ramadan_day(day: int, locale: str = "bn", style: str = "short") -> str:
    if day < 1 or day > 30:
        return f"Day {day}"
    if locale == "bn":
        if style == "full":
            return f"{BENGALI_ORDINALS[day]} রোজা"
        return f"{_bengali_numeric_ordinal(day)} রমযান"
    return f"Day {day}"
