#!/usr/bin/env python3
"""
Capabilities Demo -- chuk-mcp-wfs

Quick-start script showing what the server can do, without any network
access. Lists WFS layers, server status, full capabilities, and
demonstrates the dual output mode (JSON vs text).

Usage:
    python examples/capabilities_demo.py
"""

import asyncio

from tool_runner import ToolRunner


async def main() -> None:
    runner = ToolRunner()

    print("=" * 60)
    print("chuk-mcp-wfs -- Server Capabilities")
    print("=" * 60)

    # List all registered tools
    print(f"\nRegistered tools ({len(runner.tool_names)}):")
    for name in sorted(runner.tool_names):
        print(f"  - {name}")

    # List WFS layers
    layers = await runner.run("wfs_list_layers")
    print(f"\nWFS Layers ({len(layers['layers'])}):")
    print(f"  Default: {layers['default']}")
    for layer in layers["layers"]:
        print(f"  {layer['id']:24s}  {layer['name']:34s}  {layer['geometry']}")

    # Server status
    status = await runner.run("wfs_status")
    print("\nServer Status:")
    print(f"  {status['server']} v{status['version']}")
    print(f"  Endpoint: {status['base_url']}")
    print(f"  Debounce: {status['debounce_ms']:.0f}ms")
    print(f"  Stale after: {status['stale_time_ms'] / 1000:.0f}s")
    print(f"  Key precision: {status['precision']} decimals")

    # Full capabilities
    caps = await runner.run("wfs_capabilities")
    print("\nCapabilities:")
    print(f"  Tools: {caps['tool_count']}")
    print(f"  Zoom threshold: {caps['zoom_threshold']:.0f}")
    print(f"  Output modes: {', '.join(caps['output_modes'])}")
    print(f"  Guidance: {caps['llm_guidance']}")

    # ---------------------------------------------------------------
    # Dual output mode: text vs JSON
    # ---------------------------------------------------------------
    print("\n" + "-" * 60)
    print("Dual Output Mode Demo")
    print("-" * 60)

    print("\nwfs_status (output_mode='text'):")
    print(await runner.run_text("wfs_status"))

    print("\nwfs_capabilities (output_mode='text'):")
    print(await runner.run_text("wfs_capabilities"))

    print("\nwfs_list_layers (output_mode='text'):")
    print(await runner.run_text("wfs_list_layers"))

    await runner.close()

    print("\n" + "=" * 60)
    print("All capabilities shown above require no network access.")
    print("Run munich_pan_demo.py to see viewport caching against the")
    print("live WFS service.")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
