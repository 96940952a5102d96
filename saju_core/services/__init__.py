# services package - lazy imports to prevent startup errors
from saju_core.services.errors import SajuError, InputValidationError, CalculationError

# Lazy import: 실제 사용할 때 import
# (서브모듈 이름과 겹치지 않도록 _ 접두사)
_calc_module = None
_match_module = None


def get_calc_module():
    global _calc_module
    if _calc_module is None:
        from saju_core.services.calc_module import calc_module as _module
        _calc_module = _module
    return _calc_module


def get_match_module():
    global _match_module
    if _match_module is None:
        from saju_core.services.match_module import match_module as _module
        _match_module = _module
    return _match_module


def resolve(year, month, day, hour, minute):
    return get_calc_module().resolve(year, month, day, hour, minute)


def calculate(year, month, day, hour, minute):
    return get_calc_module().calculate(year, month, day, hour, minute)


def analyze(pillars):
    from saju_core.services.saju_analyzer import saju_analyzer
    return saju_analyzer.analyze(pillars)


def score(a, b):
    return get_match_module().score(a, b)


def score_dates(my_date, partner_date):
    return get_match_module().score_dates(my_date, partner_date)


def hour_options():
    from saju_core.services.ganji import get_hour_options
    return get_hour_options()
