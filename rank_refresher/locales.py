"""国コード・地域指定の解決モジュール.

COUNTRIES の各要素は (国名, 首都, 言語コード, Google ロケーション ID)。
"""

from __future__ import annotations

COUNTRIES: dict[str, tuple[str, str, str, int]] = {
    "AR": ("Argentina", "Buenos Aires", "es", 2032),
    "AT": ("Austria", "Vienna", "de", 2040),
    "AU": ("Australia", "Canberra", "en", 2036),
    "BD": ("Bangladesh", "Dhaka", "bn", 2050),
    "BE": ("Belgium", "Brussels", "nl", 2056),
    "BG": ("Bulgaria", "Sofia", "bg", 2100),
    "BR": ("Brazil", "Brasilia", "pt", 2076),
    "CA": ("Canada", "Ottawa", "en", 2124),
    "CH": ("Switzerland", "Bern", "de", 2756),
    "CL": ("Chile", "Santiago", "es", 2152),
    "CN": ("China", "Beijing", "zh-cn", 2156),
    "CO": ("Colombia", "Bogota", "es", 2170),
    "CZ": ("Czechia", "Prague", "cs", 2203),
    "DE": ("Germany", "Berlin", "de", 2276),
    "DK": ("Denmark", "Copenhagen", "da", 2208),
    "EG": ("Egypt", "Cairo", "ar", 2818),
    "ES": ("Spain", "Madrid", "es", 2724),
    "FI": ("Finland", "Helsinki", "fi", 2246),
    "FR": ("France", "Paris", "fr", 2250),
    "GB": ("United Kingdom", "London", "en", 2826),
    "GR": ("Greece", "Athens", "el", 2300),
    "HK": ("Hong Kong", "Hong Kong", "zh-tw", 2344),
    "HR": ("Croatia", "Zagreb", "hr", 2191),
    "HU": ("Hungary", "Budapest", "hu", 2348),
    "ID": ("Indonesia", "Jakarta", "id", 2360),
    "IE": ("Ireland", "Dublin", "en", 2372),
    "IL": ("Israel", "Jerusalem", "iw", 2376),
    "IN": ("India", "New Delhi", "en", 2356),
    "IT": ("Italy", "Rome", "it", 2380),
    "JP": ("Japan", "Tokyo", "ja", 2392),
    "KE": ("Kenya", "Nairobi", "en", 2404),
    "KR": ("South Korea", "Seoul", "ko", 2410),
    "MA": ("Morocco", "Rabat", "fr", 2504),
    "MX": ("Mexico", "Mexico City", "es", 2484),
    "MY": ("Malaysia", "Kuala Lumpur", "en", 2458),
    "NG": ("Nigeria", "Abuja", "en", 2566),
    "NL": ("Netherlands", "Amsterdam", "nl", 2528),
    "NO": ("Norway", "Oslo", "no", 2578),
    "NZ": ("New Zealand", "Wellington", "en", 2554),
    "PE": ("Peru", "Lima", "es", 2604),
    "PH": ("Philippines", "Manila", "en", 2608),
    "PK": ("Pakistan", "Islamabad", "en", 2586),
    "PL": ("Poland", "Warsaw", "pl", 2616),
    "PT": ("Portugal", "Lisbon", "pt", 2620),
    "RO": ("Romania", "Bucharest", "ro", 2642),
    "RS": ("Serbia", "Belgrade", "sr", 2688),
    "SA": ("Saudi Arabia", "Riyadh", "ar", 2682),
    "SE": ("Sweden", "Stockholm", "sv", 2752),
    "SG": ("Singapore", "Singapore", "en", 2702),
    "SK": ("Slovakia", "Bratislava", "sk", 2703),
    "TH": ("Thailand", "Bangkok", "th", 2764),
    "TR": ("Turkey", "Ankara", "tr", 2792),
    "TW": ("Taiwan", "Taipei", "zh-tw", 2158),
    "UA": ("Ukraine", "Kyiv", "uk", 2804),
    "AE": ("United Arab Emirates", "Abu Dhabi", "ar", 2784),
    "US": ("United States", "Washington, D.C.", "en", 2840),
    "VN": ("Vietnam", "Hanoi", "vi", 2704),
    "ZA": ("South Africa", "Pretoria", "en", 2710),
}


def _is_supported(code: str) -> bool:
    entry = COUNTRIES.get(code.upper())
    return bool(entry and entry[0])


def resolve_country_code(
    country: str | None = "",
    allowed_countries: list[str] | None = None,
    fallback: str = "US",
) -> str:
    """プロバイダに渡す国コードを決める.

    有効な指定コードは大文字小文字をそのまま返す。フォールバック時は大文字。

    Args:
        country: キーワードに設定された国コード
        allowed_countries: プロバイダが対応する国コード一覧 (任意)
        fallback: 既定の国コード

    Returns:
        国コード。例外は投げない。
    """
    fallback_code = (fallback or "US").upper()
    if not country or not isinstance(country, str):
        return fallback_code

    if allowed_countries:
        allowed = [c.upper() for c in allowed_countries if isinstance(c, str)]
        if country.upper() in allowed and _is_supported(country):
            return country
        if fallback_code in allowed and _is_supported(fallback_code):
            return fallback_code
        for code in allowed:
            if _is_supported(code):
                return code
        return fallback_code

    return country if _is_supported(country) else fallback_code


def country_info(country: str) -> tuple[str, str, str, int]:
    """国コードに対応する COUNTRIES の要素. 未知のコードは US."""
    return COUNTRIES.get(country.upper(), COUNTRIES["US"])


def parse_location(location: str | None, country: str = "") -> dict[str, str]:
    """地域指定 ("city,state,countryCode") を {city, state} に分解する.

    欠けている要素は空文字になる。2要素で末尾が国コードなら州とはみなさない。
    """
    if not location or not isinstance(location, str):
        return {"city": "", "state": ""}

    parts = [part.strip() for part in location.split(",")]
    city = parts[0] if parts else ""
    state = parts[1] if len(parts) > 1 else ""
    if len(parts) == 2 and country and state.upper() == country.upper():
        state = ""
    return {"city": city, "state": state}


def build_location_param(keyword_location: str | None, country: str) -> str:
    """city/state/国名をカンマで繋いだ location 値. 市も州もなければ空文字."""
    parsed = parse_location(keyword_location, country)
    if not parsed["city"] and not parsed["state"]:
        return ""
    parts = [parsed["city"], parsed["state"], country_info(country)[0]]
    return ",".join(part for part in parts if part)
