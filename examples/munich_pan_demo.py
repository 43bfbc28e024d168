#!/usr/bin/env python3
"""
Munich Pan Demo -- chuk-mcp-wfs

Pans a city-scale viewport around central Munich and shows how many WFS
requests the viewport cache actually issues:

  1. A -> B -> C -> A        (revisit: the second A is a cache hit)
  2. A -> B -> A -> B -> ... (back and forth: one request per viewport)
  3. a burst of tiny drags   (debounced into a single request)

Then prints building height statistics and one building's properties for
the final viewport.

Usage:
    python examples/munich_pan_demo.py

Requirements:
    Network access to the default WFS endpoint (or set WFS_BASE_URL)
"""

import asyncio

from tool_runner import ToolRunner

# -- Configuration -----------------------------------------------------------

# ~700m x 550m viewports around Marienplatz, zoom 16
VIEWPORTS = {
    "A": [11.572, 48.135, 11.581, 48.140],
    "B": [11.581, 48.135, 11.590, 48.140],
    "C": [11.563, 48.135, 11.572, 48.140],
}
ZOOM = 16


async def pan(runner: ToolRunner, sequence: str) -> int:
    """Settle each viewport in turn and return the requests issued."""
    before = (await runner.run("wfs_status"))["request_count"]
    for name in sequence:
        state = await runner.run("wfs_set_viewport", bbox=VIEWPORTS[name], zoom=ZOOM)
        if "feature_count" not in state:
            print(f"  {name}: ERROR {state['error']}")
            continue
        suffix = f"  ERROR {state['error']}" if state["error"] else ""
        print(f"  {name}: {state['feature_count']:5d} features{suffix}")
    after = (await runner.run("wfs_status"))["request_count"]
    return after - before


async def main() -> None:
    runner = ToolRunner()

    print("=" * 60)
    print("chuk-mcp-wfs -- Munich viewport caching")
    print("=" * 60)

    print("\n1. Revisit: A -> B -> C -> A")
    issued = await pan(runner, "ABCA")
    print(f"   Requests issued: {issued} (3 distinct viewports)")

    await runner.run("wfs_clear_cache")
    print("\n2. Back and forth: A -> B -> A -> B -> A -> B")
    issued = await pan(runner, "ABABAB")
    print(f"   Requests issued: {issued} (2 distinct viewports)")

    print("\n3. Drag burst: 20 tiny moves without waiting")
    west, south, east, north = VIEWPORTS["C"]
    for i in range(20):
        step = i * 0.0004
        await runner.run(
            "wfs_set_viewport",
            bbox=[west + step, south, east + step, north],
            zoom=ZOOM,
            wait=False,
        )
    await runner.orchestrator.wait_until_idle()
    state = await runner.run("wfs_get_state")
    print(f"   Settled on {state['cache_key']}")
    print(f"   Total requests this session: {state['request_count']}")

    print("\n4. Zoomed out below the threshold")
    state = await runner.run("wfs_set_viewport", bbox=VIEWPORTS["A"], zoom=11)
    print(f"   {state['message']}")
    await runner.run("wfs_set_viewport", bbox=VIEWPORTS["A"], zoom=ZOOM)

    print("\n" + "-" * 60)
    print("Building heights in viewport A")
    print("-" * 60)
    print(await runner.run_text("wfs_building_stats", height_min=20, height_max=200))

    print("\nFirst building:")
    print(await runner.run_text("wfs_describe_feature", index=0))

    print("\n" + await runner.run_text("wfs_status"))
    await runner.close()


if __name__ == "__main__":
    asyncio.run(main())
