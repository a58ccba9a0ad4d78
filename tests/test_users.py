"""
Users and sessions
"""
from datetime import timedelta

import pytest

from marketplace.core.clock import utc_now
from marketplace.core.errors import InvalidInputError, NotFoundError, UnauthenticatedError
from marketplace.services import UserService


class TestRegistration:

    def test_create_user(self, db):
        user = UserService.create_user(db, "Ada", "Lovelace", "Ada@Example.com", "Engine#1843")

        assert user.user_id is not None
        assert user.email == "ada@example.com"
        assert user.password_hash != "Engine#1843"

    def test_duplicate_email_rejected(self, db):
        UserService.create_user(db, "Ada", "Lovelace", "ada@example.com", "Engine#1843")

        with pytest.raises(InvalidInputError):
            UserService.create_user(db, "Other", "Ada", "ADA@example.com", "Engine#1843")


class TestSessions:

    def test_login_and_authenticate(self, db, make_user):
        user = make_user(password="Secr3t!pw")

        session = UserService.login(db, user.email, "Secr3t!pw")

        assert session["user_id"] == user.user_id
        assert UserService.authenticate(db, session["session_token"]).user_id == user.user_id

    def test_login_reuses_token(self, db, make_user):
        user = make_user()

        first = UserService.login(db, user.email, "Passw0rd!")
        second = UserService.login(db, user.email, "Passw0rd!")

        assert first["session_token"] == second["session_token"]

    def test_wrong_password(self, db, make_user):
        user = make_user()

        with pytest.raises(InvalidInputError):
            UserService.login(db, user.email, "wrong")

    def test_unknown_email(self, db):
        with pytest.raises(InvalidInputError):
            UserService.login(db, "nobody@example.com", "Passw0rd!")

    def test_logout_invalidates_token(self, db, make_user):
        user = make_user()
        token = UserService.login(db, user.email, "Passw0rd!")["session_token"]

        UserService.logout(db, UserService.authenticate(db, token))

        with pytest.raises(UnauthenticatedError):
            UserService.authenticate(db, token)

    @pytest.mark.parametrize("token", [None, "", "not-a-token"])
    def test_bad_tokens(self, db, token):
        with pytest.raises(UnauthenticatedError):
            UserService.authenticate(db, token)


class TestProfile:

    def test_profile_lists(self, db, make_user, make_item, bid_service):
        seller, bidder = make_user("Sid"), make_user()
        selling = make_item(seller)
        ended = make_item(seller, now=utc_now() - timedelta(days=3))
        other = make_item(bidder)
        bid_service.place_bid(db, selling.item_id, bidder.user_id, 500)

        profile = UserService.get_profile(db, seller.user_id)

        assert profile["first_name"] == "Sid"
        assert "email" not in profile
        assert [row["item_id"] for row in profile["selling"]] == [selling.item_id]
        assert [row["item_id"] for row in profile["auctions_ended"]] == [ended.item_id]
        assert profile["bidding_on"] == []

        bidder_profile = UserService.get_profile(db, bidder.user_id)
        assert [row["item_id"] for row in bidder_profile["bidding_on"]] == [selling.item_id]
        assert [row["item_id"] for row in bidder_profile["selling"]] == [other.item_id]

    def test_profile_missing(self, db):
        with pytest.raises(NotFoundError):
            UserService.get_profile(db, 31337)
