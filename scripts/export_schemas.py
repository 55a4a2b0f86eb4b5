"""Export JSON schemas for Plan and the Action union."""

import json
from pathlib import Path

from plan_editor.models import Plan
from plan_editor.models.actions import action_adapter


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    # Export Plan schema
    plan_schema = Plan.model_json_schema()
    plan_path = schemas_dir / "Plan.schema.json"
    with open(plan_path, "w") as f:
        json.dump(plan_schema, f, indent=2)
    print(f"Exported Plan schema to {plan_path}")

    # Export Action schema (wire keys, as the generator writes them)
    action_schema = action_adapter.json_schema(by_alias=True)
    action_path = schemas_dir / "Action.schema.json"
    with open(action_path, "w") as f:
        json.dump(action_schema, f, indent=2)
    print(f"Exported Action schema to {action_path}")


if __name__ == "__main__":
    main()
