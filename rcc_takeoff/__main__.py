"""
RCC Material Takeoff Engine - CLI Entry Point

Commands:
    estimate  - Estimate materials for a project file
    part      - Estimate materials for a single part
    template  - Write a starter project file from part presets
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .materials import (
    MaterialCalculator,
    aggregate_materials,
    aggregate_materials_by_type,
    calculate_all_parts,
    total_steel_kg,
    BOMExporter,
)
from .pricing import MaterialPriceTable, project_cost
from .project import ProjectFileError, build_template, load_part_presets, load_project
from .structural import PartType, StructuralPart

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def print_materials(materials: dict, title: str = ""):
    if title:
        print(f"\n{title}")
        print("-" * 50)
    if not materials:
        print("  (no materials)")
        return
    for key, value in materials.items():
        if isinstance(value, float):
            print(f"  {key:<40} {value:>12,.2f}")
        elif isinstance(value, int):
            print(f"  {key:<40} {value:>12,}")
        else:
            print(f"  {key:<40} {value!s:>12}")


def parse_param(text: str):
    """'columnWidth=12' -> ('columnWidth', 12.0); non-numeric values stay strings."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{text}'")
    key, value = text.split("=", 1)
    value = value.strip()
    try:
        return key.strip(), float(value)
    except ValueError:
        return key.strip(), value


def cmd_estimate(args):
    """Estimate materials for a project file."""
    try:
        project = load_project(Path(args.input))
    except ProjectFileError as e:
        print(f"Error: {e}")
        return 1

    calculator = MaterialCalculator(constants_path=args.constants)
    part_materials = calculate_all_parts(project.parts, calculator)
    totals = aggregate_materials(part_materials, calculator)
    by_type = aggregate_materials_by_type(part_materials, calculator)

    prices = None
    if not args.no_cost:
        try:
            prices = MaterialPriceTable.from_yaml(args.prices)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"No price table ({e}); skipping cost projection")
    cost = project_cost(totals, prices) if prices is not None else None

    print(f"\n{'='*60}")
    print(f"MATERIAL ESTIMATE: {project.project_id}")
    print(f"{'='*60}")
    print(f"Parts: {len(part_materials)}")

    if args.by_type:
        for part_type, materials in by_type.items():
            print_materials(materials, title=part_type)

    print_materials(totals, title="Project totals")
    print(f"\nTotal steel: {total_steel_kg(totals):,.2f} kg")

    if cost is not None:
        print(f"\nCost projection ({cost.currency})")
        print("-" * 50)
        for line in cost.lines:
            print(f"  {line.material:<25} {line.quantity:>12,.2f} x {line.unit_price:>8,.2f}"
                  f" = {line.amount:>14,.2f}")
        print(f"  {'TOTAL':<25} {cost.total:>40,.2f}")

    output_dir = Path(args.output)
    paths = BOMExporter().export_all(
        project.project_id,
        part_materials,
        totals,
        output_dir,
        by_type=by_type,
        cost=cost,
    )

    if args.excel:
        from .reporting import export_to_excel
        excel_path = output_dir / "boq" / "material_estimate.xlsx"
        export_to_excel(part_materials, totals, by_type, cost, filepath=excel_path)
        paths["material_xlsx"] = excel_path

    print(f"\nOutputs:")
    for path in paths.values():
        print(f"  - {path}")

    return 0


def cmd_part(args):
    """Estimate materials for a single part."""
    part_type = PartType.parse(args.type)
    if part_type is None:
        print(f"Unknown part type: {args.type}")
        print(f"Known types: {', '.join(t.value for t in PartType)}")
        return 1

    data = {} if args.no_preset else load_part_presets().get(part_type.value, {})
    data.update(dict(args.param or []))

    part = StructuralPart(name=args.name or part_type.value, type=part_type.value, data=data)
    calculator = MaterialCalculator(constants_path=args.constants)
    materials = calculator.calculate_part(part)

    print_materials(data, title=f"Inputs: {part.label}")
    print_materials(materials, title="Materials")
    return 0


def cmd_template(args):
    """Write a starter project file."""
    output_path = Path(args.output)
    template = build_template(args.types, name=args.name)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(template, f, sort_keys=False, allow_unicode=True)

    print(f"Template with {len(template['parts'])} parts written to: {output_path}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="RCC Material Takeoff Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a starter project, edit it, then estimate
  python -m rcc_takeoff template -o project.yaml
  python -m rcc_takeoff estimate -i project.yaml -o ./out --by-type --excel

  # Single part from its preset, with overrides
  python -m rcc_takeoff part -t column --param totalColumns=12 --param mixRatio=1:2:4
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Estimate command
    est_parser = subparsers.add_parser('estimate', help='Estimate materials for a project file')
    est_parser.add_argument('--input', '-i', required=True,
                            help='Project file (YAML or JSON)')
    est_parser.add_argument('--output', '-o', default='./out',
                            help='Output directory')
    est_parser.add_argument('--prices',
                            help='Price table YAML (default: built-in BDT table)')
    est_parser.add_argument('--no-cost', action='store_true',
                            help='Skip the cost projection')
    est_parser.add_argument('--constants',
                            help='Estimation constants YAML')
    est_parser.add_argument('--by-type', action='store_true',
                            help='Print totals per part type')
    est_parser.add_argument('--excel', action='store_true',
                            help='Also export an Excel workbook')
    est_parser.set_defaults(func=cmd_estimate)

    # Part command
    part_parser = subparsers.add_parser('part', help='Estimate materials for a single part')
    part_parser.add_argument('--type', '-t', required=True,
                             help='Part type, e.g. column, pile-cap')
    part_parser.add_argument('--name', '-n', default='',
                             help='Part name')
    part_parser.add_argument('--param', '-p', action='append', type=parse_param,
                             help='Parameter override key=value (repeatable)')
    part_parser.add_argument('--no-preset', action='store_true',
                             help='Start from empty inputs instead of the preset')
    part_parser.add_argument('--constants',
                             help='Estimation constants YAML')
    part_parser.set_defaults(func=cmd_part)

    # Template command
    tpl_parser = subparsers.add_parser('template', help='Write a starter project file')
    tpl_parser.add_argument('--output', '-o', default='project.yaml',
                            help='Output project file')
    tpl_parser.add_argument('--types', nargs='*',
                            help='Part types to include (default: all)')
    tpl_parser.add_argument('--name', default='New Project',
                            help='Project name')
    tpl_parser.set_defaults(func=cmd_template)

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command:
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
