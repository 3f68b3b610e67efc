"""Cross-cutting helpers shared by every layer (context, telemetry, utils)."""
