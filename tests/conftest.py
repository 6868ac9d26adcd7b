import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")

from satscope.tle_parser import ElementSetRecord  # noqa: E402


# Element sets, all with epoch 2008-09-20 12:25:40 UTC (day 264.51782528)
ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

MEO_NAME = "NAVSAT MEO"
MEO_LINE1 = "1 99001U 08001A   08264.51782528  .00000000  00000-0  00000-0 0  9996"
MEO_LINE2 = "2 99001  55.0000  10.0000 0050000  30.0000 330.0000  2.00560000 10000"

GEO_NAME = "COMSAT GEO"
GEO_LINE1 = "1 99002U 08002A   08264.51782528  .00000000  00000-0  00000-0 0  9998"
GEO_LINE2 = "2 99002   0.0500  90.0000 0002000 100.0000 260.0000  1.00270000 10008"

# Low perigee with an extreme drag term; SGP4 rejects it within the first hour
DECAY_NAME = "DEBRIS DECAY"
DECAY_LINE1 = "1 99003U 08003A   08264.51782528  .00000000  00000-0  50000-0 0  9995"
DECAY_LINE2 = "2 99003  51.6000 200.0000 0010000  90.0000 270.0000 16.30000000 10007"

EPOCH = datetime(2008, 9, 20, 12, 25, 40, tzinfo=timezone.utc)


@pytest.fixture
def epoch() -> datetime:
    return EPOCH


@pytest.fixture
def iss_record() -> ElementSetRecord:
    return ElementSetRecord(name=ISS_NAME, line1=ISS_LINE1, line2=ISS_LINE2, index=0)


@pytest.fixture
def meo_record() -> ElementSetRecord:
    return ElementSetRecord(name=MEO_NAME, line1=MEO_LINE1, line2=MEO_LINE2, index=1)


@pytest.fixture
def geo_record() -> ElementSetRecord:
    return ElementSetRecord(name=GEO_NAME, line1=GEO_LINE1, line2=GEO_LINE2, index=2)


@pytest.fixture
def decaying_record() -> ElementSetRecord:
    return ElementSetRecord(name=DECAY_NAME, line1=DECAY_LINE1, line2=DECAY_LINE2, index=4)


@pytest.fixture
def junk_record() -> ElementSetRecord:
    return ElementSetRecord(name="JUNK", line1="not an element line", line2="nor this", index=3)


@pytest.fixture
def tle_text() -> str:
    return (
        f"{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}\n"
        f"{GEO_NAME}\n{GEO_LINE1}\n{GEO_LINE2}\n"
    )


@pytest.fixture
def tle_file(tmp_path, tle_text):
    path = tmp_path / "tle.txt"
    path.write_text(tle_text)
    return path
