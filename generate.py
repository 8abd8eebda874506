#!/usr/bin/env python3
"""Command-line front end for Recipe Chef.

Collects the meal constraints, submits them to the GenerationController and
renders each RequestState as it arrives: a progress line while Loading, an
error banner on Failure and a recipe card on Success.

Usage:
    python generate.py --ingredients "chicken, rice" --diet non-vegetarian --fat oil
    python generate.py --diet vegetarian --fat butter --allergies nuts --request "Make it spicy"
    python generate.py --debug ...   # Also print the validated recipe as JSON

Exit status: 0 on Success, 1 on Failure or invalid configuration.
"""

import argparse
import asyncio
import sys
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.controller.controller import GenerationController
from src.models.models import Constraints, DietaryType, Failure, FatType, Loading, Recipe, RequestState, Success
from src.transport.transport import ResilientTransport
from src.utils.config import config
from src.utils.logger import logger

console = Console()


def render_recipe(recipe: Recipe) -> None:
    """Print the recipe card: name, description, total time, ingredients, steps."""
    header = f"[bold]{recipe.recipe_name}[/bold]"
    if recipe.description:
        header += f"\n[italic]{recipe.description}[/italic]"
    header += f"\n\n⏱  {recipe.prep_time_minutes} Minutes Total"
    console.print(Panel(header, title="🧑‍🍳 Your Recipe", border_style="magenta"))

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Ingredients", style="magenta", ratio=2)
    table.add_column("Instructions", style="yellow", ratio=3)
    steps = [f"{idx}. {step}" for idx, step in enumerate(recipe.instructions, start=1)]
    for row in range(max(len(recipe.ingredients), len(steps))):
        ingredient = f"• {recipe.ingredients[row]}" if row < len(recipe.ingredients) else ""
        step = steps[row] if row < len(steps) else ""
        table.add_row(ingredient, step)
    console.print(table)


def render_state(state: RequestState) -> None:
    """State listener wired to the controller."""
    if isinstance(state, Loading):
        console.print("[cyan]⏳ Whipping up your recipe...[/cyan]")
    elif isinstance(state, Failure):
        console.print(Panel(f"⚠️  {state.error.message}", border_style="red", style="red"))
    elif isinstance(state, Success):
        render_recipe(state.recipe)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a personalized recipe with Gemini.")
    parser.add_argument("--ingredients", default="", help="Main ingredients you have (e.g. 'chicken breast, rice')")
    parser.add_argument(
        "--diet",
        default=DietaryType.VEGETARIAN.value,
        help="vegetarian or non-vegetarian (veg / non-veg also accepted)",
    )
    parser.add_argument("--fat", default=FatType.OIL.value, choices=[f.value for f in FatType], help="Cooking fat")
    parser.add_argument("--allergies", default="", help="Allergies to avoid (e.g. 'nuts, gluten')")
    parser.add_argument("--request", default="", help="Special request (e.g. 'Make it spicy')")
    parser.add_argument("--debug", action="store_true", help="Print the validated recipe as JSON")
    return parser.parse_args(argv)


async def run_generation(constraints: Constraints, debug: bool = False) -> RequestState:
    """Wire transport and controller from config and run one submission."""
    transport = ResilientTransport.from_config(config)
    controller = GenerationController(transport, temperature=config.TEMPERATURE)
    unsubscribe = controller.subscribe(render_state)
    try:
        state = await controller.submit(constraints)
    finally:
        unsubscribe()

    if debug and isinstance(state, Success):
        console.print_json(state.recipe.model_dump_json(by_alias=True))
    return state


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]✗ Configuration error: {e}[/red]")
        return 1

    try:
        constraints = Constraints(
            ingredients=args.ingredients,
            dietary_type=args.diet,
            fat=args.fat,
            allergies=args.allergies,
            special_request=args.request,
        )
    except ValidationError as e:
        console.print(f"[red]✗ Invalid input: {e.errors()[0]['msg']}[/red]")
        return 1

    logger.info(
        f"Generating recipe (model={config.GEMINI_MODEL}, diet={constraints.dietary_type.value}, "
        f"fat={constraints.fat.value})"
    )

    try:
        state = asyncio.run(run_generation(constraints, debug=args.debug))
    except KeyboardInterrupt:
        logger.info("Generation interrupted by user.")
        return 1

    return 0 if isinstance(state, Success) else 1


if __name__ == "__main__":
    sys.exit(main())
