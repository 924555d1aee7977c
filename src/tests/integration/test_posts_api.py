"""Integration tests for posts, comments, reactions and read receipts."""

import pytest
from httpx import AsyncClient


class TestListPosts:

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, services, auth_headers, as_actor, make_post, ids):
        as_actor("franchise_owner", [ids.location_a])
        services.posts.find_posts.return_value = ([make_post()], 45)

        response = await client.get(
            "/api/posts?limit=10&offset=20&type=announcement&search=%20sales%20", headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 45, "limit": 10, "offset": 20, "has_more": True}
        assert body["data"][0]["id"] == ids.post
        filters = services.posts.find_posts.call_args.args[0]
        assert filters.post_type == "announcement"
        assert filters.search == "sales"
        assert filters.limit == 10
        assert filters.offset == 20

    @pytest.mark.asyncio
    async def test_last_page(self, client: AsyncClient, services, auth_headers, as_actor):
        as_actor()
        services.posts.find_posts.return_value = ([], 45)

        response = await client.get("/api/posts?limit=10&offset=40", headers=auth_headers)

        assert response.json()["pagination"]["has_more"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query,message", [
        ("limit=0", "limit parameter must be between 1 and 100"),
        ("limit=101", "limit parameter must be between 1 and 100"),
        ("limit=ten", "limit parameter must be an integer"),
        ("offset=-1", "offset parameter must be at least 0"),
        ("type=memo", "type must be one of: message, announcement, request, performance_update"),
    ])
    async def test_bad_query(self, client: AsyncClient, services, auth_headers, query, message):
        response = await client.get(f"/api/posts?{query}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Bad Request", "message": message}
        services.posts.find_posts.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_membership(self, client: AsyncClient, services, auth_headers, no_membership):
        response = await client.get("/api/posts", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "data": [],
            "pagination": {"total": 0, "limit": 20, "offset": 0, "has_more": False},
        }
        services.posts.find_posts.assert_not_called()


class TestCreatePost:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload,message", [
        ({"post_type": "message", "targeting": {"type": "global"}}, "body is required"),
        ({"body": "Hi", "post_type": "memo", "targeting": {"type": "global"}},
         "post_type must be one of: message, announcement, request, performance_update"),
        ({"body": "Hi", "post_type": "message", "targeting": {"type": "region"}},
         "targeting.type must be one of: global, specific_locations"),
        ({"body": "Hi", "post_type": "message", "targeting": {"type": "specific_locations", "location_ids": []}},
         "targeting.location_ids must be a non-empty array"),
        ({"body": "Hi", "post_type": "message", "targeting": {"type": "global"}, "due_date": "tomorrow"},
         "due_date must be an ISO 8601 date-time"),
        ({"body": "Hi", "post_type": "message", "targeting": {"type": "global"}, "title": "x" * 501},
         "title must not exceed 500 characters"),
    ])
    async def test_validation(self, client: AsyncClient, services, auth_headers, payload, message):
        response = await client.post("/api/posts", json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == message
        services.posts.create_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_global_post(self, client: AsyncClient, services, auth_headers, as_actor, make_post):
        actor = as_actor()
        services.posts.create_post.return_value = make_post()

        response = await client.post("/api/posts", json={
            "title": "Weekly update",
            "body": "Numbers are in",
            "post_type": "announcement",
            "targeting": {"type": "global"},
            "due_date": "2026-11-01T17:00:00Z",
        }, headers=auth_headers)

        assert response.status_code == 201
        called_actor, data = services.posts.create_post.call_args.args
        assert called_actor == actor
        assert data.targeting == {"type": "global"}
        assert data.due_date.year == 2026
        services.locations.resolve_location_ids.assert_not_called()

    @pytest.mark.asyncio
    async def test_specific_locations_keep_resolved(
        self, client: AsyncClient, services, auth_headers, as_actor, make_post, ids
    ):
        as_actor("franchise_owner", [ids.location_b])
        services.locations.resolve_location_ids.return_value = [ids.location_b]
        targeting = {"type": "specific_locations", "location_ids": [ids.location_b]}
        services.posts.create_post.return_value = make_post(targeting=targeting)

        response = await client.post("/api/posts", json={
            "body": "Store hours changed",
            "post_type": "message",
            "targeting": {"type": "locations", "location_ids": [ids.location_a.upper(), ids.location_b]},
        }, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["targeting"] == targeting
        data = services.posts.create_post.call_args.args[1]
        assert data.targeting == targeting
        tenant_id, requested = services.locations.resolve_location_ids.call_args.args
        assert tenant_id == ids.tenant
        assert list(requested) == [ids.location_a, ids.location_b]

    @pytest.mark.asyncio
    async def test_no_resolvable_location(self, client: AsyncClient, services, auth_headers, as_actor, ids):
        as_actor("franchise_owner")
        services.locations.resolve_location_ids.return_value = []

        response = await client.post("/api/posts", json={
            "body": "Hi",
            "post_type": "message",
            "targeting": {"type": "specific_locations", "location_ids": [ids.location_a]},
        }, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to the targeted locations"
        services.posts.create_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_location_id_is_forbidden(self, client: AsyncClient, services, auth_headers, as_actor):
        as_actor("tenant_admin")
        services.locations.resolve_location_ids.return_value = []

        response = await client.post("/api/posts", json={
            "body": "Hi",
            "post_type": "message",
            "targeting": {"type": "specific_locations", "location_ids": ["x"]},
        }, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to the targeted locations"
        services.posts.create_post.assert_not_called()


class TestComments:

    @pytest.mark.asyncio
    async def test_bad_post_id_rejected_first(self, client: AsyncClient, services):
        response = await client.post("/api/posts/not-a-uuid/comments", json={"body": "Hi"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid post ID format"
        services.memberships.get_actor.assert_not_called()

    @pytest.mark.asyncio
    async def test_invisible_post(self, client: AsyncClient, services, auth_headers, as_actor, ids):
        as_actor("franchise_staff", [ids.location_a])
        services.posts.get_visible_post.return_value = None

        response = await client.post(f"/api/posts/{ids.post}/comments", json={"body": "Hi"}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"

    @pytest.mark.asyncio
    async def test_parent_on_other_post(
        self, client: AsyncClient, services, auth_headers, as_actor, make_post, make_comment, ids
    ):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()
        services.comments.get_comment.return_value = make_comment(post_id=ids.request)

        response = await client.post(
            f"/api/posts/{ids.post}/comments",
            json={"body": "Hi", "parent_comment_id": ids.comment},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "parent_comment_id must reference a comment on the same post"

    @pytest.mark.asyncio
    async def test_reply_to_reply(
        self, client: AsyncClient, services, auth_headers, as_actor, make_post, make_comment, ids
    ):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()
        services.comments.get_comment.return_value = make_comment(parent_comment_id=ids.attachment)

        response = await client.post(
            f"/api/posts/{ids.post}/comments",
            json={"body": "Hi", "parent_comment_id": ids.comment},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Replies can only be made to top-level comments"

    @pytest.mark.asyncio
    async def test_reply(self, client: AsyncClient, services, auth_headers, as_actor, make_post, make_comment, ids):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()
        services.comments.get_comment.return_value = make_comment()
        services.comments.create_comment.return_value = make_comment(
            id=ids.attachment, parent_comment_id=ids.comment, body="Agreed"
        )

        response = await client.post(
            f"/api/posts/{ids.post}/comments",
            json={"body": "Agreed", "parent_comment_id": ids.comment.upper()},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["parent_comment_id"] == ids.comment
        data = services.comments.create_comment.call_args.args[2]
        assert data.parent_comment_id == ids.comment


class TestReactions:

    @pytest.mark.asyncio
    async def test_add(self, client: AsyncClient, services, auth_headers, as_actor, make_post, ids):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()

        response = await client.post(
            f"/api/posts/{ids.post}/reactions", json={"type": "like", "action": "add"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Reaction added successfully",
            "post_id": ids.post,
            "action": "add",
            "type": "like",
        }
        services.reactions.add_reaction.assert_awaited_once_with(ids.post, ids.user, "like")

    @pytest.mark.asyncio
    async def test_remove(self, client: AsyncClient, services, auth_headers, as_actor, make_post, ids):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()
        services.reactions.remove_reaction.return_value = False

        response = await client.post(
            f"/api/posts/{ids.post}/reactions",
            json={"type": "acknowledge", "action": "remove"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Reaction removed successfully"
        services.reactions.remove_reaction.assert_awaited_once_with(ids.post, ids.user)

    @pytest.mark.asyncio
    async def test_bad_type(self, client: AsyncClient, services, auth_headers, ids):
        response = await client.post(
            f"/api/posts/{ids.post}/reactions", json={"type": "love", "action": "add"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "type must be one of: like, acknowledge, needs_attention"
        services.reactions.add_reaction.assert_not_called()


class TestReadReceipts:

    @pytest.mark.asyncio
    async def test_mark_read(self, client: AsyncClient, services, auth_headers, as_actor, make_post, make_receipt, ids):
        as_actor()
        services.posts.get_visible_post.return_value = make_post()
        services.receipts.mark_read.return_value = make_receipt()

        response = await client.post(f"/api/posts/{ids.post}/read", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Post marked as read successfully"
        assert data["user_id"] == ids.user

    @pytest.mark.asyncio
    async def test_no_membership(self, client: AsyncClient, services, auth_headers, no_membership, ids):
        response = await client.post(f"/api/posts/{ids.post}/read", headers=auth_headers)

        assert response.status_code == 404
        services.receipts.mark_read.assert_not_called()
