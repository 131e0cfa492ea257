"""Like endpoint tests."""

from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from promptshare.main import app
from tests.conftest import MOCK_USER_ID

client = TestClient(app)


def _make_mock_client(
    *,
    prompt_exists: bool = True,
    viewer_liked: bool = False,
    like_count: int = 0,
) -> tuple[MagicMock, MagicMock]:
    """Build a mock Supabase client for like endpoint tests.

    Args:
        prompt_exists: Whether prompts.select().eq(id) finds the prompt.
        viewer_liked: Row returned by likes.select(id).eq(prompt_id).eq(user_id).
        like_count: Exact count returned by likes.select(id, count).eq(prompt_id).

    Returns:
        The client mock and the likes table mock.
    """
    mock_prompts_table = MagicMock()
    mock_likes_table = MagicMock()

    # prompts.select(id, user_id).eq(id).execute()
    prompt_data = [{"id": "p1", "user_id": "author-1"}] if prompt_exists else []
    mock_prompts_table.select.return_value.eq.return_value.execute.return_value = (
        MagicMock(data=prompt_data)
    )

    # likes.select(id, count=exact).eq(prompt_id).execute()
    mock_likes_table.select.return_value.eq.return_value.execute.return_value = (
        MagicMock(data=[], count=like_count)
    )

    # likes.select(id).eq(prompt_id).eq(user_id).execute()
    mock_likes_table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(
        data=[{"id": "like-1"}] if viewer_liked else []
    )

    mock_client = MagicMock()

    def route_table(name: str) -> MagicMock:
        if name == "prompts":
            return mock_prompts_table
        if name == "likes":
            return mock_likes_table
        return MagicMock()

    mock_client.table.side_effect = route_table
    return mock_client, mock_likes_table


# --- GET /api/prompts/{prompt_id}/like ---


@patch("promptshare.routers.likes.get_supabase_client")
def test_like_state_for_viewer(mock_get_client: MagicMock) -> None:
    mock_client, _ = _make_mock_client(viewer_liked=True, like_count=5)
    mock_get_client.return_value = mock_client

    response = client.get("/api/prompts/p1/like")

    assert response.status_code == 200
    assert response.json() == {"prompt_id": "p1", "is_liked": True, "like_count": 5}


@patch("promptshare.routers.likes.get_supabase_client")
def test_like_state_for_anonymous_viewer(
    mock_get_client: MagicMock, anonymous_viewer: None
) -> None:
    mock_client, likes_table = _make_mock_client(viewer_liked=True, like_count=2)
    mock_get_client.return_value = mock_client

    response = client.get("/api/prompts/p1/like")

    assert response.status_code == 200
    assert response.json()["is_liked"] is False
    assert response.json()["like_count"] == 2
    likes_table.select.return_value.eq.return_value.eq.assert_not_called()


# --- POST /api/prompts/{prompt_id}/like ---


@patch("promptshare.routers.likes.get_supabase_client")
def test_like_inserts_row(mock_get_client: MagicMock) -> None:
    """Verify a like inserts (prompt_id, user_id) and returns the new count."""
    mock_client, likes_table = _make_mock_client(like_count=4)
    mock_get_client.return_value = mock_client

    response = client.post("/api/prompts/p1/like")

    assert response.status_code == 200
    assert response.json() == {"prompt_id": "p1", "is_liked": True, "like_count": 4}
    likes_table.insert.assert_called_once_with(
        {"prompt_id": "p1", "user_id": MOCK_USER_ID}
    )


@patch("promptshare.routers.likes.get_supabase_client")
def test_duplicate_like_returns_409(mock_get_client: MagicMock) -> None:
    """Verify the uniqueness violation surfaces as a conflict, not a second like."""
    mock_client, likes_table = _make_mock_client(like_count=4)
    likes_table.insert.return_value.execute.side_effect = APIError(
        {
            "message": "duplicate key value violates unique constraint",
            "code": "23505",
            "hint": None,
            "details": None,
        }
    )
    mock_get_client.return_value = mock_client

    response = client.post("/api/prompts/p1/like")

    assert response.status_code == 409
    assert response.json()["detail"] == "Prompt already liked"


@patch("promptshare.routers.likes.get_supabase_client")
def test_like_store_failure_returns_502(mock_get_client: MagicMock) -> None:
    mock_client, likes_table = _make_mock_client()
    likes_table.insert.return_value.execute.side_effect = APIError(
        {
            "message": "permission denied for table likes",
            "code": "42501",
            "hint": None,
            "details": None,
        }
    )
    mock_get_client.return_value = mock_client

    response = client.post("/api/prompts/p1/like")

    assert response.status_code == 502
    assert response.json()["detail"] == "permission denied for table likes"


@patch("promptshare.routers.likes.get_supabase_client")
def test_like_prompt_not_found(mock_get_client: MagicMock) -> None:
    mock_client, likes_table = _make_mock_client(prompt_exists=False)
    mock_get_client.return_value = mock_client

    response = client.post("/api/prompts/missing/like")

    assert response.status_code == 404
    assert response.json()["detail"] == "Prompt not found"
    likes_table.insert.assert_not_called()


# --- DELETE /api/prompts/{prompt_id}/like ---


@patch("promptshare.routers.likes.get_supabase_client")
def test_unlike_filters_by_prompt_and_user(mock_get_client: MagicMock) -> None:
    """Verify the delete is scoped to the caller's own like, not the whole prompt."""
    mock_client, likes_table = _make_mock_client(like_count=0)
    mock_get_client.return_value = mock_client

    response = client.delete("/api/prompts/p1/like")

    assert response.status_code == 200
    assert response.json() == {"prompt_id": "p1", "is_liked": False, "like_count": 0}
    delete_chain = likes_table.delete.return_value
    delete_chain.eq.assert_called_once_with("prompt_id", "p1")
    delete_chain.eq.return_value.eq.assert_called_once_with("user_id", MOCK_USER_ID)
