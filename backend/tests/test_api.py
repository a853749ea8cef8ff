def _call(client, name, **arguments):
    return client.post("/api/tools/call", json={"name": name, "arguments": arguments})


def test_health(client):
    body = client.get("/").json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["generation_enabled"] is False
    assert body["item_bank"] == {"items": 12, "topics": 9}
    assert "mcq_generate" in body["tools"]


def test_list_tools(client):
    tools = {tool["name"]: tool for tool in client.get("/tools").json()["tools"]}
    assert len(tools) == 6
    assert "objective" in tools["mcq_match_topic"]["input_schema"]["properties"]


def test_call_match_topic(client):
    response = _call(client, "mcq_match_topic", objective="JavaScript Closures")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"]["matched_topic"] == "js-closures"
    assert body["result"]["match_type"] == "fuzzy"


def test_call_record_then_status(client):
    _call(client, "mcq_record", user_id="u1", objective="hooks", selected_answer="a", correct_answer="A")
    result = _call(client, "mcq_get_status", user_id="u1", objective="hooks").json()["result"]
    assert result["current_score"] == "1/1"


def test_unknown_tool_is_400(client):
    response = _call(client, "nope")
    assert response.status_code == 400
    assert "Unknown tool" in response.json()["detail"]


def test_bad_arguments_are_400(client):
    assert _call(client, "mcq_match_topic").status_code == 400
