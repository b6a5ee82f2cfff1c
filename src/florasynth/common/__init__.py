"""Cross-cutting helpers shared by all florasynth layers."""
