"""Tests for database models."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from todoboard.models import Category, Todo, TodoCategory, Urgency
from todoboard.models.category import DEFAULT_CATEGORIES

from conftest import USER_ID


class TestTodoModel:
    """Tests for the Todo model."""

    @pytest.mark.asyncio
    async def test_create_todo(self, test_session):
        """Test creating a basic todo."""
        todo = Todo(title="Test todo", creator_id=USER_ID)
        test_session.add(todo)
        await test_session.flush()

        assert todo.id is not None
        assert todo.title == "Test todo"
        assert todo.completed is False
        assert todo.urgency is Urgency.LOW
        assert todo.created_at is not None

    @pytest.mark.asyncio
    async def test_todo_mark_complete(self, test_session):
        """Test marking a todo as complete."""
        todo = Todo(title="Test todo", creator_id=USER_ID)
        test_session.add(todo)
        await test_session.flush()

        todo.mark_complete()
        await test_session.flush()

        assert todo.completed is True
        assert todo.completed_at is not None

    @pytest.mark.asyncio
    async def test_todo_mark_incomplete(self, test_session):
        """Test marking a completed todo as incomplete."""
        todo = Todo(title="Test todo", creator_id=USER_ID)
        todo.mark_complete()
        test_session.add(todo)
        await test_session.flush()

        todo.mark_incomplete()
        await test_session.flush()

        assert todo.completed is False
        assert todo.completed_at is None

    @pytest.mark.asyncio
    async def test_todo_with_categories(self, test_session):
        """Test linking a todo to categories through the join table."""
        work = Category(name="Work", color="#FF0000", user_id=USER_ID)
        home = Category(name="Home", color="#00FF00", user_id=USER_ID)
        test_session.add_all([work, home])
        await test_session.flush()

        todo = Todo(
            title="Work task",
            creator_id=USER_ID,
            category_links=[
                TodoCategory(category_id=work.id),
                TodoCategory(category_id=home.id),
            ],
        )
        test_session.add(todo)
        await test_session.flush()

        assert todo.category_ids == [work.id, home.id]

    @pytest.mark.asyncio
    async def test_location_round_trips_as_json(self, test_session):
        """Test the location column stores a structured value."""
        location = {"address": "1 Main St", "lat": 52.5, "lng": 13.4}
        todo = Todo(title="Visit", creator_id=USER_ID, location=location)
        test_session.add(todo)
        await test_session.commit()

        result = await test_session.execute(
            select(Todo.location).where(Todo.id == todo.id)
        )
        assert result.scalar_one() == location

    @pytest.mark.asyncio
    async def test_timestamps_come_back_in_utc(self, test_session):
        """Test aware values are stored as UTC and naive ones are taken as UTC."""
        aware = datetime(2030, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=5)))
        naive = datetime(2030, 3, 1, 12, 0)
        first = Todo(title="Aware", creator_id=USER_ID, reminder=aware)
        second = Todo(title="Naive", creator_id=USER_ID, reminder=naive)
        test_session.add_all([first, second])
        await test_session.commit()

        result = await test_session.execute(
            select(Todo.title, Todo.reminder).order_by(Todo.title)
        )
        reminders = dict(result.all())

        assert reminders["Aware"] == aware
        assert reminders["Aware"].tzinfo == timezone.utc
        assert reminders["Aware"].hour == 7
        assert reminders["Naive"] == naive.replace(tzinfo=timezone.utc)


class TestCategoryModel:
    """Tests for the Category model."""

    @pytest.mark.asyncio
    async def test_create_category(self, test_session):
        """Test creating a category."""
        category = Category(name="Personal", color="#00FF00", user_id=USER_ID)
        test_session.add(category)
        await test_session.flush()

        assert category.id is not None
        assert category.name == "Personal"
        assert category.color == "#00FF00"

    @pytest.mark.asyncio
    async def test_names_are_not_unique(self, test_session):
        """Test two categories may share a name."""
        test_session.add_all([
            Category(name="Errands", color="#111111", user_id=USER_ID),
            Category(name="Errands", color="#222222", user_id=USER_ID),
        ])
        await test_session.flush()

        count = await test_session.execute(
            select(func.count()).select_from(Category).where(Category.name == "Errands")
        )
        assert count.scalar() == 2

    def test_defaults(self):
        """Test the default categories for a new user."""
        defaults = Category.get_defaults(USER_ID)

        assert [c.name for c in defaults] == [name for name, _ in DEFAULT_CATEGORIES]
        assert all(c.user_id == USER_ID for c in defaults)


class TestUrgency:
    """Tests for the urgency ordering."""

    def test_rank_order(self):
        """Test low < medium < high < urgent."""
        ranks = [u.rank for u in (Urgency.LOW, Urgency.MEDIUM, Urgency.HIGH, Urgency.URGENT)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4
