from bingo.services.bingo.channel import BroadcastChannel, room_for


def drain(sub, keepalive=0.01):
    return [item for item in sub.listen(keepalive) if item is not None]


def test_publish_reaches_every_subscriber_in_order(channel):
    a = channel.subscribe('s1')
    b = channel.subscribe('s1')
    other = channel.subscribe('s2')
    for i in range(3):
        assert channel.publish('s1', 'draw', {'drawIndex': i}) == 2
    channel.close('s1')

    expected = [('draw', {'drawIndex': i}) for i in range(3)]
    assert drain(a) == expected
    assert drain(b) == expected
    assert other.queue.empty()


def test_unsubscribe_stops_delivery(channel):
    sub = channel.subscribe('s1')
    channel.unsubscribe(sub)
    assert channel.subscriber_count('s1') == 0
    assert channel.publish('s1', 'draw', {}) == 0


def test_listen_yields_keepalive_on_silence(channel):
    sub = channel.subscribe('s1')
    stream = sub.listen(0.01)
    assert next(stream) is None
    channel.publish('s1', 'countdown', {'countdown': 5})
    assert next(stream) == ('countdown', {'countdown': 5})


def test_slow_subscriber_is_dropped():
    channel = BroadcastChannel(maxsize=2)
    slow = channel.subscribe('s1')
    channel.publish('s1', 'draw', {'n': 1})
    channel.publish('s1', 'draw', {'n': 2})
    assert channel.publish('s1', 'draw', {'n': 3}) == 0
    assert channel.subscriber_count('s1') == 0
    # Buffered events are still readable; the stream ends once drained
    assert drain(slow) == [('draw', {'n': 1}), ('draw', {'n': 2})]


def test_events_are_mirrored_to_socket_room():
    emitted = []
    channel = BroadcastChannel(emit=lambda event, data, **kw: emitted.append((event, data, kw)))
    channel.publish('abc', 'gameEnd', {'reason': 'Bingo'})
    assert emitted == [('gameEnd', {'reason': 'Bingo'}, {'to': room_for('abc'), 'namespace': '/ws'})]


def test_emit_failure_does_not_break_publish(channel):
    def broken(*args, **kwargs):
        raise RuntimeError('socket down')

    channel = BroadcastChannel(emit=broken)
    sub = channel.subscribe('s1')
    assert channel.publish('s1', 'draw', {}) == 1
    assert sub.queue.qsize() == 1
