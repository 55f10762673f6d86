"""Main entry point for the 2/3-of-the-average game simulator."""

import asyncio
import os
import random
import sys
from pathlib import Path
from typing import Callable, Optional

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .agents.player import Agent
from .engine.clock import ManualClock
from .engine.config import build_config
from .engine.errors import GameError
from .engine.game import Game, GameResult
from .engine.registry import GameRegistry
from .llm.openrouter import OpenRouterClient
from .simulation import play_round


# Load environment variables
load_dotenv()

console = Console()


def load_config(config_path: str = "config/game.yaml") -> dict:
    """Load simulator configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)

    with open(path) as f:
        return yaml.safe_load(f)


def build_agents(
    player_configs: list[dict],
    llm_client: Optional[OpenRouterClient],
    seed: Optional[int] = None,
) -> list[Agent]:
    """Create the simulated players described in the config."""
    rng = random.Random(seed)
    return [
        Agent(
            name=p["name"],
            strategy=p.get("strategy", "level_k"),
            depth=p.get("depth", 2),
            model=p.get("model", "anthropic/claude-sonnet-4"),
            llm_client=llm_client if p.get("strategy") == "llm" else None,
            reveals=p.get("reveals", True),
            rng=random.Random(rng.random()),
        )
        for p in player_configs
    ]


def tie_break_entropy(seed: Optional[int]) -> Optional[Callable[[], int]]:
    """Seed source for tie-breaks. None keeps the games on the wall clock."""
    if seed is None:
        return None
    rng = random.Random(seed)
    return lambda: rng.getrandbits(256)


def display_welcome():
    """Display welcome message."""
    console.print(Panel.fit(
        "[bold cyan]TWO THIRDS OF THE AVERAGE[/bold cyan]\n"
        "[dim]Commit, reveal, and outguess the crowd[/dim]",
        border_style="cyan",
    ))
    console.print()


def display_players(agents: list[Agent]):
    """Display player information."""
    table = Table(title="Players", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Strategy", style="green")
    table.add_column("Reveals", style="yellow")

    for agent in agents:
        strategy = agent.strategy
        if agent.strategy == "level_k":
            strategy = f"level_k (k={agent.depth})"
        elif agent.strategy == "llm":
            strategy = f"llm ({agent.model})"
        table.add_row(agent.name, strategy, "yes" if agent.reveals else "[dim]no[/dim]")

    console.print(table)
    console.print()


def display_results(game: Game, result: GameResult):
    """Display the outcome of one round."""
    if result.revealed_count == 0:
        console.print(Panel(
            f"[bold red]Game {game.game_id}: nobody revealed[/bold red]\n"
            f"The pool of {result.prize_pool} goes to {result.winner}.",
            border_style="red",
        ))
        return

    table = Table(
        title=f"Game {game.game_id}: average {result.average}, target {result.target}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Player", style="cyan")
    table.add_column("Guess", justify="right")
    table.add_column("Distance", justify="right")

    for identity in game.roster:
        player = game.get_player(identity)
        if player.has_revealed:
            distance = abs(player.revealed_guess - result.target)
            name = f"[bold green]{identity}[/bold green]" if identity == result.winner else identity
            table.add_row(name, str(player.revealed_guess), str(distance))
        else:
            table.add_row(identity, "[dim]hidden[/dim]", "-")

    console.print(table)
    console.print(
        f"[green]{result.winner} wins {result.winner_prize}[/green] "
        f"[dim](service fee {result.service_fee})[/dim]"
    )
    console.print()


def display_payouts(registry: GameRegistry, identities: list[str]):
    """Withdraw everyone's winnings and show the totals."""
    table = Table(title="Payouts", show_header=True, header_style="bold")
    table.add_column("Identity", style="cyan")
    table.add_column("Withdrawn", justify="right")
    table.add_column("Net", justify="right")

    for identity in identities:
        withdrawn = registry.withdraw_all(identity)
        net = registry.ledger.net(identity)
        color = "green" if net > 0 else "red" if net < 0 else "white"
        table.add_row(identity, str(withdrawn), f"[{color}]{net}[/{color}]")

    console.print(table)
    console.print()


async def main():
    """Main entry point."""
    display_welcome()

    config_path = sys.argv[1] if len(sys.argv) > 1 else "config/game.yaml"
    console.print(f"[dim]Loading config from: {config_path}[/dim]")
    config_data = load_config(config_path)

    try:
        defaults = build_config(config_data.get("defaults", {}))
    except GameError as e:
        console.print(f"[red]Invalid game parameters:[/red] {e}")
        sys.exit(1)

    player_configs = config_data["players"]
    llm_client = None
    if any(p.get("strategy") == "llm" for p in player_configs):
        api_key = os.getenv("OPENROUTER_API_KEY")
        if not api_key:
            console.print("[red]Error: OPENROUTER_API_KEY not set![/red]")
            console.print("Set it in .env or the environment, or drop the llm players.")
            sys.exit(1)
        llm_client = OpenRouterClient(api_key=api_key)

    admin = config_data.get("admin", "house")
    seed = config_data.get("seed")
    clock = ManualClock()
    registry = GameRegistry(
        admin=admin,
        defaults=defaults,
        clock=clock,
        entropy=tie_break_entropy(seed),
        log_dir=config_data.get("log_dir", "games"),
    )

    agents = build_agents(player_configs, llm_client, seed)
    display_players(agents)

    rounds = config_data.get("rounds", 1)
    try:
        for _ in range(rounds):
            game = registry.create_game(admin)
            registry.set_current(admin, game.game_id)
            result = await play_round(game, agents, clock)
            display_results(game, result)
            clock.advance(3600)
    except KeyboardInterrupt:
        console.print("\n[yellow]Simulation interrupted by user.[/yellow]")
        sys.exit(0)
    except GameError as e:
        console.print(f"\n[red]Game rejected a move: {e}[/red]")
        raise

    display_payouts(registry, [admin] + [a.name for a in agents])

    if registry.log_dir:
        console.print(f"[dim]Game logs saved to: {registry.log_dir}/[/dim]")


def run():
    """Entry point for the CLI."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
