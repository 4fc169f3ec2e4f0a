from deployctl.UTILS.string_interpolation import EnvironmentInterpolator

def test_interpolate():
    interpolator = EnvironmentInterpolator({'PORT': '8000', 'EMPTY': ''})
    assert interpolator.interpolate('http://localhost:${PORT}') == 'http://localhost:8000'
    assert interpolator.interpolate('${HOST:-localhost}:${PORT}') == 'localhost:8000'
    assert interpolator.interpolate('${EMPTY:-fallback}') == 'fallback'
    assert interpolator.interpolate('cost: $$5') == 'cost: $5'
    assert interpolator.missing == []

def test_missing_variables_are_recorded():
    interpolator = EnvironmentInterpolator({})
    assert interpolator.interpolate('key=${API_KEY}') == 'key='
    assert interpolator.missing == ['API_KEY']
