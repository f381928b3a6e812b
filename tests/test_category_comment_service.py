"""
Category and comment service tests.
"""

import pytest

from taskboard.services import ConflictError, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_create_and_list_categories(services):
    work = await services.categories.create_category("  Work ")
    home = await services.categories.create_category("Home")

    assert work.name == "Work"
    listed = await services.categories.list_categories()
    assert {c.id for c in listed} == {work.id, home.id}


@pytest.mark.asyncio
async def test_duplicate_category_name(services):
    await services.categories.create_category("Work")
    with pytest.raises(ConflictError):
        await services.categories.create_category("Work")
    assert len(await services.categories.list_categories()) == 1


@pytest.mark.asyncio
async def test_blank_category_name(services):
    with pytest.raises(ValidationError):
        await services.categories.create_category("   ")


@pytest.mark.asyncio
async def test_anyone_can_comment_on_existing_task(services, alice, bob):
    task = await services.tasks.create_task(alice.id, "Review", "2024-01-01")

    comment = await services.comments.add_comment(bob.id, task.id, "Looks fine")
    assert comment.task_id == task.id
    assert comment.user_id == bob.id
    assert comment.description == "Looks fine"


@pytest.mark.asyncio
async def test_comment_on_missing_task(services, alice):
    with pytest.raises(NotFoundError):
        await services.comments.add_comment(alice.id, 777, "Hello?")


@pytest.mark.asyncio
async def test_blank_comment(services, alice):
    task = await services.tasks.create_task(alice.id, "Review", "2024-01-01")
    with pytest.raises(ValidationError):
        await services.comments.add_comment(alice.id, task.id, "")
