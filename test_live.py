"""Live test: connect to /ws/events, poke a few variables, watch events arrive."""

import asyncio
import json
import os
from urllib.parse import quote

import httpx
import websockets


HOST = os.environ.get("UASIM_HOST", "127.0.0.1:8000")
EVENTS_URI = f"ws://{HOST}/ws/events"
API = f"http://{HOST}/api"

SEVERITY = "ns=1;s=DEV.MySeverity"
SECRET = "ns=1;s=DEV.MySecretVar"
FEED = "ns=3;i=55229"


async def event_listener(ready_event: asyncio.Event):
    """Connect to /ws/events and print whatever the simulators raise."""
    async with websockets.connect(EVENTS_URI) as ws:
        print("[EVENTS] Connected, waiting for events...\n")
        ready_event.set()

        while True:
            data = json.loads(await ws.recv())
            kind = data.get("event_type")
            line = f"[EVENTS] {data.get('time')} {kind:<28} sev={data.get('severity'):>4}  {data.get('message')}"
            if kind == "NonExclusiveLimitAlarmType":
                line += f"  ({data.get('previous_band')} -> {data.get('band')}, input={data.get('input_value')})"
            print(line)


async def poke_variables():
    """Read and write a few variables over HTTP."""
    async with httpx.AsyncClient(base_url=API) as client:
        for node_id, body, auth in [
            (SEVERITY, {"data_type": "Double", "value": 500}, None),
            (SEVERITY, {"data_type": "Double", "value": 5000}, None),
            (SECRET, {"data_type": "Int32", "value": 7}, None),
        ]:
            resp = await client.put(f"/variables/{quote(node_id, safe='')}", json=body, auth=auth)
            print(f"[WRITE] {node_id} <- {body['value']}: {resp.status_code} {resp.json().get('status')}")

        resp = await client.get(f"/variables/{quote(FEED, safe='')}")
        print(f"[READ] FeedOverride = {resp.json().get('value')}")

        resp = await client.get(f"/history/{quote(SEVERITY, safe='')}")
        print(f"[HISTORY] MySeverity has {resp.json().get('count')} record(s)")


async def main():
    print("Connecting to events WebSocket...")
    ready = asyncio.Event()

    listener_task = asyncio.create_task(event_listener(ready))
    await ready.wait()

    print("\nWriting test values...\n")
    await poke_variables()

    # MyCondition flips every 15 s and the MyVar ramp crosses all alarm bands in ~85 s
    print("\nWatching events for 90s...\n")
    await asyncio.sleep(90)

    listener_task.cancel()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
