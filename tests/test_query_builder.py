"""
Tests for QueryBuilder.
Covers: predicates, ordering, paging, include options, tracking mode.
"""

import pytest
from sqlalchemy import not_, or_

from sozluk.domain.exceptions import InvalidArgumentError
from sozluk.domain.models import Entry, User
from sozluk.domain.repository import QueryBuilder


@pytest.fixture
def people(session, make_user):
    users = [
        make_user(first_name="Ann", user_name="ann", email_confirmed=True),
        make_user(first_name="Bob", user_name="bob", email_confirmed=False),
        make_user(first_name="Cid", user_name="cid", email_confirmed=True, last_name=None),
    ]
    session.add_all(users)
    session.save_changes()
    return users


def _names(session, builder):
    return [u.first_name for u in session.scalars(builder.build())]


class TestFilters:
    """Test filter construction"""

    def test_equality(self, session, people):
        """Test a plain equality predicate"""
        builder = QueryBuilder(User).where(User.user_name == "bob")

        assert _names(session, builder) == ["Bob"]

    def test_none_is_ignored(self, session, people):
        """Test a None predicate means the whole set"""
        builder = QueryBuilder(User).where(None).order_by("first_name")

        assert _names(session, builder) == ["Ann", "Bob", "Cid"]

    @pytest.mark.parametrize(
        ("predicate", "expected"),
        [
            (User.first_name.in_(["Ann", "Cid"]), ["Ann", "Cid"]),
            (User.first_name != "Ann", ["Bob", "Cid"]),
            (User.user_name.like("a%"), ["Ann"]),
            (User.last_name.is_(None), ["Cid"]),
            (User.first_name >= "Bob", ["Bob", "Cid"]),
        ],
    )
    def test_column_predicates(self, session, people, predicate, expected):
        """Test column expressions are applied as given"""
        builder = QueryBuilder(User).where(predicate).order_by("first_name")

        assert _names(session, builder) == expected

    def test_repeated_where_is_conjunction(self, session, people):
        """Test conditions from several where calls are combined with AND"""
        builder = (
            QueryBuilder(User)
            .where(or_(User.first_name == "Ann", User.first_name == "Bob"), None)
            .where(not_(User.email_confirmed.is_(False)))
        )

        assert _names(session, builder) == ["Ann"]

    def test_keyword_filters_are_not_supported(self):
        """Test the builder has no keyword filter language"""
        assert not hasattr(QueryBuilder(User), "filter")


class TestShape:
    """Test ordering, paging and options"""

    def test_order_limit_offset(self, session, people):
        """Test descending order with paging"""
        builder = QueryBuilder(User).order_by("-first_name").offset(1).limit(1)

        assert _names(session, builder) == ["Bob"]

    def test_order_by_column_expression(self, session, people):
        """Test ordering by a column expression"""
        builder = QueryBuilder(User).order_by(User.user_name.desc())

        assert _names(session, builder) == ["Cid", "Bob", "Ann"]

    def test_order_by_unknown_field(self):
        """Test ordering by an unknown field raises"""
        with pytest.raises(InvalidArgumentError) as exc_info:
            QueryBuilder(User).order_by("-nickname")

        assert exc_info.value.argument == "order_by"

    def test_include_adds_load_option(self):
        """Test include attaches a loader option to the statement"""
        query = QueryBuilder(Entry).include(Entry.created_by, "entry_comments.created_by").build()

        assert len(query._with_options) == 2

    def test_include_rejects_columns(self):
        """Test include of a column raises"""
        with pytest.raises(InvalidArgumentError):
            QueryBuilder(Entry).include("entry_comments.content")

    def test_tracking_mode(self):
        """Test tracking mode defaults to no tracking and can be switched"""
        builder = QueryBuilder(User)

        assert builder.no_tracking is True
        assert builder.as_tracking().no_tracking is False
        assert builder.as_no_tracking().no_tracking is True
        assert builder.model_class is User
