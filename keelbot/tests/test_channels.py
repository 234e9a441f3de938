"""
Tests for the Channel Classifier

Public lookup first, private/direct fallback second, fail closed.
"""

import asyncio

import pytest


def _info(channel_id, name, **flags):
    from keelbot.slackbot.transport import ChannelInfo
    return ChannelInfo(id=channel_id, name=name, **flags)


@pytest.fixture
def classifier(mock_transport):
    from keelbot.slackbot.channels import ChannelClassifier
    return ChannelClassifier(mock_transport, "general", lookup_timeout=0.05)


class TestIsApprovalsChannel:

    @pytest.mark.asyncio
    async def test_public_channel_match(self, classifier, mock_transport):
        mock_transport.get_channel_info.return_value = _info("C1", "general")

        assert await classifier.is_approvals_channel("C1") is True
        mock_transport.get_conversation_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_public_channel_mismatch(self, classifier, mock_transport):
        mock_transport.get_channel_info.return_value = _info("C2", "random")

        assert await classifier.is_approvals_channel("C2") is False
        mock_transport.get_conversation_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_private_channel_fallback_match(self, classifier, mock_transport):
        from keelbot.common.errors import TransportError
        mock_transport.get_channel_info.side_effect = TransportError("not public")
        mock_transport.get_conversation_info.return_value = _info("G1", "general", is_private=True)

        assert await classifier.is_approvals_channel("G1") is True
        mock_transport.get_conversation_info.assert_awaited_once_with("G1", use_cache=False)

    @pytest.mark.asyncio
    async def test_private_channel_fallback_mismatch(self, classifier, mock_transport):
        from keelbot.common.errors import TransportError
        mock_transport.get_channel_info.side_effect = TransportError("not public")
        mock_transport.get_conversation_info.return_value = _info("D1", "", is_im=True)

        assert await classifier.is_approvals_channel("D1") is False

    @pytest.mark.asyncio
    async def test_both_lookups_fail_closed(self, classifier, mock_transport):
        from keelbot.common.errors import TransportError
        mock_transport.get_channel_info.side_effect = TransportError("channel_not_found")
        mock_transport.get_conversation_info.side_effect = TransportError("channel_not_found")

        assert await classifier.is_approvals_channel("C404") is False

    @pytest.mark.asyncio
    async def test_slow_lookup_counts_as_failure(self, classifier, mock_transport):
        from keelbot.common.errors import TransportError

        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        mock_transport.get_channel_info.side_effect = hang
        mock_transport.get_conversation_info.side_effect = TransportError("channel_not_found")

        assert await classifier.is_approvals_channel("C1") is False

    @pytest.mark.asyncio
    async def test_repeated_calls_agree(self, classifier, mock_transport):
        mock_transport.get_channel_info.return_value = _info("C1", "general")

        results = [await classifier.is_approvals_channel("C1") for _ in range(3)]

        assert results == [True, True, True]

    def test_exposes_channel_name(self, classifier):
        assert classifier.approvals_channel == "general"
