import pytest

from pubserve.http.validators import (
	ByteRange,
	etag,
	etagMatches,
	httpdate,
	isFresh,
	isRangeFresh,
	parsehttpdate,
	parseRange,
)

MODIFIED: float = 784111777.25
TAG: str = etag(1000, MODIFIED)


def test_httpdate_roundtrip():
	assert httpdate(MODIFIED) == "Sun, 06 Nov 1994 08:49:37 GMT"
	assert parsehttpdate("Sun, 06 Nov 1994 08:49:37 GMT") == 784111777.0


def test_parsehttpdate_zones_are_utc():
	# `-0000` means UTC with no zone information, not local time
	assert parsehttpdate("Sun, 06 Nov 1994 08:49:37 -0000") == 784111777.0
	assert parsehttpdate("Sun, 06 Nov 1994 09:49:37 +0100") == 784111777.0


@pytest.mark.parametrize("value", [None, "", "yesterday", "Sun, 99 Nov 1994"])
def test_parsehttpdate_ignores_garbage(value):
	assert parsehttpdate(value) is None


def test_etag_is_weak_and_changes_with_file():
	assert TAG == 'W/"3e8-b690b435e2"'
	assert etag(1001, MODIFIED) != TAG
	assert etag(1000, MODIFIED + 1) != TAG


def test_etag_matches():
	assert etagMatches(TAG, TAG)
	assert etagMatches("*", TAG)
	assert etagMatches(f'"other", {TAG}', TAG)
	# Weak comparison ignores the weakness indicator
	assert etagMatches(TAG.removeprefix("W/"), TAG)
	assert not etagMatches('"other"', TAG)


def test_is_fresh():
	assert not isFresh({}, TAG, MODIFIED)
	assert isFresh({"If-None-Match": TAG}, TAG, MODIFIED)
	assert isFresh({"If-Modified-Since": httpdate(MODIFIED)}, TAG, MODIFIED)
	assert isFresh({"If-Modified-Since": httpdate(MODIFIED + 60)}, TAG, MODIFIED)
	assert not isFresh({"If-Modified-Since": httpdate(MODIFIED - 60)}, TAG, MODIFIED)
	assert not isFresh({"If-Modified-Since": "garbage"}, TAG, MODIFIED)


def test_if_none_match_takes_precedence():
	headers = {"If-None-Match": '"other"', "If-Modified-Since": httpdate(MODIFIED)}
	assert not isFresh(headers, TAG, MODIFIED)


def test_no_cache_is_never_fresh():
	headers = {"If-None-Match": TAG, "Cache-Control": "no-cache"}
	assert not isFresh(headers, TAG, MODIFIED)


def test_is_range_fresh():
	assert isRangeFresh({}, TAG, MODIFIED)
	assert isRangeFresh({"If-Range": TAG}, TAG, MODIFIED)
	assert not isRangeFresh({"If-Range": '"other"'}, TAG, MODIFIED)
	assert isRangeFresh({"If-Range": httpdate(MODIFIED)}, TAG, MODIFIED)
	assert not isRangeFresh({"If-Range": httpdate(MODIFIED - 60)}, TAG, MODIFIED)


@pytest.mark.parametrize(
	"header,expected",
	[
		(None, None),
		("bytes=0-9", ByteRange(0, 9, 100)),
		("bytes=90-", ByteRange(90, 99, 100)),
		("bytes=-10", ByteRange(90, 99, 100)),
		("bytes=-500", ByteRange(0, 99, 100)),
		("bytes=50-500", ByteRange(50, 99, 100)),
		("bytes = 1 - 2", ByteRange(1, 2, 100)),
		("bytes=100-", False),
		("bytes=9-1", False),
		("bytes=-", None),
		("bytes=0-1,5-6", None),
		("items=0-1", None),
	],
)
def test_parse_range(header, expected):
	assert parseRange(header, 100) == expected


def test_byte_range():
	r = ByteRange(10, 19, 100)
	assert r.length == 10
	assert r.contentRange == "bytes 10-19/100"


# EOF
