import argparse
import json
import urllib.error
import urllib.request
from uuid import uuid4


def call(
    method: str,
    url: str,
    payload: dict | None = None,
    token: str | None = None,
    timeout: float = 5.0,
) -> tuple[int, dict | list | None]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = token
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    request = urllib.request.Request(url, data=data, headers=headers, method=method)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.status, json.loads(response.read().decode("utf-8") or "null")
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="ignore")
        try:
            return exc.code, json.loads(body)
        except ValueError:
            return exc.code, {"error": body}
    except urllib.error.URLError as exc:
        return 0, {"error": str(exc)}


def expect(step: str, status: int, expected: int, body) -> bool:
    ok = status == expected
    print(f"{step}_status={status}" + ("" if ok else f" expected={expected} body={str(body)[:160]}"))
    return ok


def register(base_url: str, username: str) -> dict:
    status, body = call(
        "POST",
        f"{base_url}/auth/register",
        {"username": username, "password": "SmokePass123!", "steamId": f"smoke-{username}"},
    )
    if not expect(f"register_{username}", status, 201, body):
        raise SystemExit(1)
    return body


def main() -> None:
    parser = argparse.ArgumentParser(description="End-to-end smoke check for the PDA API")
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")
    marker = uuid4().hex[:8]

    print("Running PDA smoke check...")
    status, body = call("GET", f"{base_url}/health")
    expect("health", status, 200, body)

    first = register(base_url, f"smoke_a_{marker}")
    second = register(base_url, f"smoke_b_{marker}")
    first_id = first["user"]["id"]
    second_id = second["user"]["id"]

    status, body = call(
        "POST",
        f"{base_url}/auth/login",
        {"username": f"smoke_a_{marker}", "password": "SmokePass123!"},
    )
    expect("login", status, 200, body)
    token_a = body["token"] if status == 200 else first["token"]
    token_b = second["token"]

    status, body = call("GET", f"{base_url}/users/me", token=None)
    expect("unauthenticated", status, 401, body)

    status, body = call("POST", f"{base_url}/friend-requests", {"toUserId": second_id}, token_a)
    expect("friend_request", status, 201, body)
    status, pending = call("GET", f"{base_url}/friend-requests", token=token_b)
    expect("pending_list", status, 200, pending)
    if status == 200 and pending:
        status, body = call(
            "POST",
            f"{base_url}/friend-requests/respond",
            {"requestId": pending[0]["id"], "status": "ACCEPTED"},
            token_b,
        )
        expect("friend_accept", status, 200, body)

    status, body = call("GET", f"{base_url}/users/{first_id}", token=token_b)
    if expect("user_detail", status, 200, body):
        friend_ids = [friend["id"] for friend in body.get("friends", [])]
        print("ok=friendship_visible" if second_id in friend_ids else "warning=friendship_missing")

    status, body = call("POST", f"{base_url}/messages", {"content": f"smoke {marker}"}, token_a)
    expect("global_message", status, 201, body)
    status, body = call(
        "POST",
        f"{base_url}/messages",
        {"content": "direct smoke", "recipientId": second_id},
        token_a,
    )
    expect("direct_message", status, 201, body)
    status, body = call("GET", f"{base_url}/messages/direct?recipientId={first_id}", token=token_b)
    expect("direct_history", status, 200, body)

    status, note = call("POST", f"{base_url}/notes", {"title": "smoke", "content": marker}, token_a)
    if expect("note_create", status, 201, note):
        status, body = call("DELETE", f"{base_url}/notes/{note['id']}", token=token_a)
        expect("note_delete", status, 200, body)

    status, body = call("POST", f"{base_url}/auth/logout", token=token_a)
    expect("logout", status, 200, body)
    print("done=true")


if __name__ == "__main__":
    main()
