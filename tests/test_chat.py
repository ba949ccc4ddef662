"""Tests for the chat feed and the vote cycle."""

import pytest

from chatlife.chat import ChatFeed, VoteManager


@pytest.fixture
def world(make_world):
    notes = []
    world = make_world(on_notification=lambda title, detail: notes.append(title))
    world.notes = notes
    return world


class TestChatFeed:
    def test_first_message_spawns_chatter(self, world):
        feed = ChatFeed(world)
        assert feed.spawn_chance() == 1.0
        assert feed.handle_message("zed", "hi")
        assert world.pending_effects == 2
        world.step(0.01)
        chatters = [o for o in world.organisms if o.is_chatter]
        assert [o.name for o in chatters] == ["zed"]

    def test_repeat_chatter_only_adds_energy(self, world):
        feed = ChatFeed(world)
        feed.handle_message("zed", "hi")
        assert not feed.handle_message("zed", "again")
        assert feed.message_count == 2
        assert world.pending_effects == 3

    def test_every_message_feeds_energy(self, world):
        feed = ChatFeed(world)
        for i in range(5):
            feed.handle_message(f"user{i}", "hi")
        world.step(0.1)
        expected = 50.0 + 5 * world.config.energy.energy_per_message - world.config.energy.decay_rate * 0.1
        assert world.energy == pytest.approx(expected)

    @pytest.mark.parametrize("username", ["", "  ", None])
    def test_anonymous_messages_ignored(self, world, username):
        feed = ChatFeed(world)
        assert not feed.handle_message(username, "hi")
        assert world.pending_effects == 0

    def test_spawn_chance_drops_with_audience(self, world):
        feed = ChatFeed(world)
        feed.chatters.update(f"user{i}" for i in range(120))
        assert feed.spawn_chance() == 0.3

    def test_connect_normalizes_channel(self, world):
        feed = ChatFeed(world)
        feed.connect("#SomeChannel ")
        assert feed.channel == "somechannel"
        assert feed.connected
        feed.disconnect()
        assert not feed.connected
        assert not feed.chatters


class TestVoteManager:
    def test_cycle_opens_and_closes(self, world):
        votes = VoteManager(world)
        votes.update(world.config.voting.interval)
        assert votes.active
        assert votes.update(world.config.voting.duration) is None
        assert not votes.active
        assert votes.time_until_next == world.config.voting.interval + world.config.voting.cooldown

    def test_no_vote_while_disconnected(self, world):
        votes = VoteManager(world)
        votes.update(world.config.voting.interval * 2, connected=False)
        assert not votes.active

    def test_winner_is_executed(self, world):
        votes = VoteManager(world)
        votes.start_vote()
        assert votes.cast_vote("!food")
        assert votes.cast_vote("!FOOD ")
        assert votes.cast_vote("!heal")
        assert not votes.cast_vote("!nuke")
        assert votes.end_vote() == "!food"
        assert world.notes == ["Spawn Food"]
        world.step(0.01)
        assert len(world.food) == world.config.voting.food_batch

    def test_tie_goes_to_first_option(self, world):
        votes = VoteManager(world)
        votes.start_vote()
        votes.cast_vote("!spawn")
        votes.cast_vote("!bomb")
        assert votes.end_vote() == "!bomb"

    def test_empty_vote_does_nothing(self, world):
        votes = VoteManager(world)
        votes.start_vote()
        assert votes.end_vote() is None
        assert world.pending_effects == 0
        assert world.notes == []

    def test_votes_ignored_when_closed(self, world):
        votes = VoteManager(world)
        assert not votes.cast_vote("!food")

    def test_chat_casts_votes(self, world):
        votes = VoteManager(world)
        feed = ChatFeed(world, votes)
        votes.start_vote()
        feed.handle_message("a", "!heal")
        feed.handle_message("b", "!heal please")
        feed.handle_message("c", "!spawn")
        counts = {option.command: count for option, count, _ in votes.tally()}
        assert counts == {"!food": 0, "!bomb": 0, "!heal": 1, "!spawn": 1}

    def test_spawn_command(self, world):
        votes = VoteManager(world)
        votes.execute("!spawn")
        world.step(0.01)
        assert world.living_count() == world.config.voting.spawn_count

    def test_bomb_command_damages_area(self, world):
        votes = VoteManager(world)
        votes.execute("!bomb")
        world.step(0.01)
        assert len(world.particles) > 0

    def test_unknown_command(self, world):
        with pytest.raises(ValueError):
            VoteManager(world).execute("!nuke")
