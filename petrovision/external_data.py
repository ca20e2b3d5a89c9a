"""
External enrichment lookups: crude benchmarks and country facts.

Both lookups are optional. Any failure (no API key, network error, bad
payload) returns the static fallback values, so callers never need to handle
errors from this module.
"""

import copy
import logging
from typing import Any, Dict, Optional

import requests

from petrovision.config import (EIA_BASE_URL, EIA_SERIES, COUNTRY_FACTS_URL,
                                FALLBACK_BENCHMARKS, FALLBACK_COUNTRY_FACTS)

logger = logging.getLogger(__name__)


def _latest_eia_value(payload: Dict[str, Any]) -> float:
    return float(payload['series'][0]['data'][0][1])


def get_benchmarks(
    api_key: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: float = 10.0
) -> Dict[str, Dict[str, Any]]:
    """
    Fetch Brent and WTI spot prices from EIA, with Dubai approximated as Brent - 2.

    Args:
        api_key: EIA API key. Without it the fallback prices are returned.
        session: Optional requests session (injected in tests).
        timeout: Request timeout in seconds.

    Returns:
        Dictionary keyed by brent/wti/dubai with price, unit and source.
    """
    if not api_key:
        return copy.deepcopy(FALLBACK_BENCHMARKS)

    http = session or requests.Session()

    try:
        prices = {}
        for name, series_id in (('brent', EIA_SERIES['BRENT']), ('wti', EIA_SERIES['WTI'])):
            response = http.get(
                EIA_BASE_URL,
                params={'api_key': api_key, 'series_id': series_id},
                timeout=timeout
            )
            response.raise_for_status()
            prices[name] = _latest_eia_value(response.json())
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning("Benchmark lookup failed, using fallback prices: %s", e)
        return copy.deepcopy(FALLBACK_BENCHMARKS)

    dubai = max(0.0, round((prices['brent'] - 2) * 10) / 10)

    return {
        'brent': {'price': prices['brent'], 'unit': "USD/bbl", 'source': "EIA"},
        'wti': {'price': prices['wti'], 'unit': "USD/bbl", 'source': "EIA"},
        'dubai': {'price': dubai, 'unit': "USD/bbl", 'source': "approx"},
    }


def get_country_facts(
    session: Optional[requests.Session] = None,
    timeout: float = 10.0
) -> Dict[str, Any]:
    """
    Look up South Sudan facts from restcountries.com.

    Returns:
        Dictionary with capital, population, region, subregion, languages and
        flag URL. Missing fields are filled from the fallback values.
    """
    http = session or requests.Session()
    fallback = FALLBACK_COUNTRY_FACTS

    try:
        response = http.get(COUNTRY_FACTS_URL, params={'fullText': 'true'}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        item = data[0] if isinstance(data, list) and data else None
        if not isinstance(item, dict):
            raise ValueError("No country data in response")

        capital = item.get('capital') or []
        languages = item.get('languages') or {}
        flags = item.get('flags') or {}

        return {
            'capital': capital[0] if capital else fallback['capital'],
            'population': item.get('population') or fallback['population'],
            'region': item.get('region') or fallback['region'],
            'subregion': item.get('subregion') or fallback['subregion'],
            'languages': ", ".join(languages.values()) if languages else "—",
            'flag': flags.get('svg') or flags.get('png') or "",
        }
    except (requests.RequestException, ValueError, AttributeError, TypeError) as e:
        logger.warning("Country facts lookup failed, using fallback: %s", e)
        return dict(fallback)
