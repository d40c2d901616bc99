import pytest
from sqlalchemy import select

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.modules.users.models import User


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (None, None, (20, 0)),
        (0, -5, (1, 0)),
        (500, 10, (100, 10)),
        (15, 30, (15, 30)),
    ],
)
def test_normalize_page_clamps(limit, offset, expected):
    assert normalize_page(limit, offset) == expected


def test_build_pagination_middle_page():
    assert build_pagination(10, 10, 25) == {
        "limit": 10,
        "offset": 10,
        "total_count": 25,
        "total_pages": 3,
        "current_page": 2,
        "has_next": True,
        "has_prev": True,
    }


def test_build_pagination_empty():
    block = build_pagination(20, 0, 0)
    assert block["total_pages"] == 0
    assert block["current_page"] == 1
    assert block["has_next"] is False
    assert block["has_prev"] is False


def test_build_pagination_last_page():
    block = build_pagination(10, 20, 25)
    assert block["has_next"] is False
    assert block["current_page"] == 3


def test_count_rows_ignores_limit_and_order(session, make_user):
    for _ in range(5):
        make_user()
    stmt = select(User).order_by(User.id.desc())
    assert count_rows(session, paginate(stmt, 2, 1)) == 5
    page = session.execute(paginate(stmt, 2, 1)).scalars().all()
    assert len(page) == 2
