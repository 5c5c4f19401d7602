from runtime.core.events import Event, ProgressionEvent, DialogueEvent

def test_module_unlocked_payload(event_bus):
    received = []
    def on_unlocked(event):
        received.append(event)

    event_bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, on_unlocked)
    event_bus.publish(ProgressionEvent.MODULE_UNLOCKED, module_id="forest")

    assert len(received) == 1
    assert received[0].type == ProgressionEvent.MODULE_UNLOCKED
    assert received[0]["module_id"] == "forest"

def test_handlers_only_see_their_event_type(event_bus):
    received = []

    event_bus.subscribe(ProgressionEvent.TASK_COMPLETED, lambda e: received.append(e.type), weak=False)
    event_bus.publish(ProgressionEvent.TASK_ACCEPTED, module_id="intro", task_id="essay")
    event_bus.publish(DialogueEvent.DIALOGUE_ENDED, dialogue_id="owl")
    event_bus.publish(ProgressionEvent.TASK_COMPLETED, module_id="intro", task_id="essay")

    assert received == [ProgressionEvent.TASK_COMPLETED]

def test_unsubscribe_save_listener(event_bus):
    saves = []
    def autosave(event):
        saves.append(event["module_id"])

    event_bus.subscribe(ProgressionEvent.MODULE_COMPLETED, autosave)
    event_bus.unsubscribe(ProgressionEvent.MODULE_COMPLETED, autosave)
    event_bus.publish(ProgressionEvent.MODULE_COMPLETED, module_id="intro")

    assert saves == []

def test_priority_orders_progression_listeners(event_bus):
    order = []

    event_bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, lambda e: order.append("analytics"), priority=1, weak=False)
    event_bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, lambda e: order.append("save"), priority=10, weak=False)
    event_bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, lambda e: order.append("map"), priority=5, weak=False)

    event_bus.publish(ProgressionEvent.MODULE_UNLOCKED, module_id="forest")

    assert order == ["save", "map", "analytics"]

def test_consumed_node_event_stops_propagation(event_bus):
    received = []

    def subtitles(event):
        received.append(("subtitles", event["node_id"]))
        event.consume()

    def narrator(event):
        received.append(("narrator", event["node_id"]))

    event_bus.subscribe(DialogueEvent.NODE_ENTERED, subtitles, priority=10)
    event_bus.subscribe(DialogueEvent.NODE_ENTERED, narrator, priority=5)

    event = event_bus.publish(DialogueEvent.NODE_ENTERED, dialogue_id="owl", node_id="start")

    assert received == [("subtitles", "start")]
    assert event.consumed

def test_one_shot_greeting_listener(event_bus):
    started = []

    event_bus.subscribe(
        DialogueEvent.DIALOGUE_STARTED,
        lambda e: started.append(e["npc_id"]),
        one_shot=True,
        weak=False,
    )
    event_bus.publish(DialogueEvent.DIALOGUE_STARTED, dialogue_id="owl", npc_id="owl")
    event_bus.publish(DialogueEvent.DIALOGUE_STARTED, dialogue_id="fox", npc_id="fox")

    assert started == ["owl"]

def test_weak_handler_is_dropped_when_deleted(event_bus):
    received = []
    def on_reset(event):
        received.append(event["module_id"])

    event_bus.subscribe(ProgressionEvent.MODULE_RESET, on_reset)
    del on_reset
    event_bus.publish(ProgressionEvent.MODULE_RESET, module_id="intro")

    assert received == []

def test_failing_listener_does_not_stop_dispatch(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("listener failed")

    event_bus.subscribe(ProgressionEvent.TASK_COMPLETED, broken, priority=10)
    event_bus.subscribe(ProgressionEvent.TASK_COMPLETED, lambda e: received.append(e["task_id"]), weak=False)

    event_bus.publish(ProgressionEvent.TASK_COMPLETED, module_id="intro", task_id="essay")

    assert received == ["essay"]
    assert "listener failed" in caplog.text

def test_unlock_published_while_completing_is_queued(event_bus):
    order = []

    def on_completed(event):
        order.append(("completed", event["module_id"]))
        event_bus.publish(ProgressionEvent.MODULE_UNLOCKED, module_id="forest")
        order.append(("completed done", event["module_id"]))

    event_bus.subscribe(ProgressionEvent.MODULE_COMPLETED, on_completed)
    event_bus.subscribe(
        ProgressionEvent.MODULE_UNLOCKED,
        lambda e: order.append(("unlocked", e["module_id"])),
        weak=False,
    )

    event_bus.publish(ProgressionEvent.MODULE_COMPLETED, module_id="intro")

    assert order == [
        ("completed", "intro"),
        ("completed done", "intro"),
        ("unlocked", "forest"),
    ]

def test_clear_one_event_type(event_bus):
    received = []

    event_bus.subscribe(ProgressionEvent.TASK_ACCEPTED, lambda e: received.append(e.type), weak=False)
    event_bus.subscribe(ProgressionEvent.TASK_COMPLETED, lambda e: received.append(e.type), weak=False)
    event_bus.clear(ProgressionEvent.TASK_ACCEPTED)

    event_bus.publish(ProgressionEvent.TASK_ACCEPTED, module_id="intro", task_id="essay")
    event_bus.publish(ProgressionEvent.TASK_COMPLETED, module_id="intro", task_id="essay")

    assert received == [ProgressionEvent.TASK_COMPLETED]

def test_store_publishes_task_payloads(store, event_bus):
    received = []
    for event_type in (ProgressionEvent.TASK_ACCEPTED, ProgressionEvent.TASK_COMPLETED):
        event_bus.subscribe(event_type, lambda e: received.append((e.type, e.data)), weak=False)

    store.accept_task("intro", "essay")
    store.complete_task("intro", "essay")

    assert received == [
        (ProgressionEvent.TASK_ACCEPTED, {"module_id": "intro", "task_id": "essay"}),
        (ProgressionEvent.TASK_COMPLETED, {"module_id": "intro", "task_id": "essay"}),
    ]

def test_event_get_and_item_access():
    event = Event(type=ProgressionEvent.MODULE_UNLOCKED, data={"module_id": "forest"})

    assert event["module_id"] == "forest"
    assert event.get("missing", "default") == "default"
