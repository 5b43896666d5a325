"""
Summaries over endpoint test results.
"""
from collections import Counter
from typing import Any, Dict, List

TOP_ERRORS = 5


def summarize(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Summarize a result set.

    Args:
        results: Result records produced by TestExecutor

    Returns:
        total/success/failed counts, integer success rate, status code
        histogram and the most frequent error messages
    """
    total = len(results)
    success = sum(1 for r in results if r.get('success'))
    failed = total - success

    status_codes: Dict[str, int] = {}
    for r in results:
        code = r.get('statusCode')
        key = 'unknown' if code is None else str(code)
        status_codes[key] = status_codes.get(key, 0) + 1

    # Counter keeps first-seen order, and most_common() sorts stably
    errors = Counter(r['error'] for r in results if not r.get('success') and r.get('error'))
    common_errors = [
        {'error': message, 'count': count}
        for message, count in errors.most_common(TOP_ERRORS)
    ]

    return {
        'total': total,
        'success': success,
        'failed': failed,
        'successRate': int(success * 100 / total + 0.5) if total else 0,
        'statusCodes': status_codes,
        'commonErrors': common_errors,
    }


def build_report(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Report shape returned to callers: summary plus the raw results."""
    return {'summary': summarize(results), 'results': results}
