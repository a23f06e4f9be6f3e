from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console

from demo_oracle.cipher import CipherSuite, PaddingOracle
from pad_probe.codec import bytes_to_hex, parse_block
from pad_probe.engine import BlockResult, solve_block
from pad_probe.errors import PadProbeError
from pad_probe.log import configure_logging
from pad_probe.oracle import OracleFn, load_oracle_fn
from pad_probe.progress import SingleSlotQueue, SnapshotPublisher
from pad_probe.settings import AttackSettings
from pad_probe.state_snapshot import StateSnapshot
from pad_probe.ui import render_result, ui_loop


DEMO_CIPHERS = {
    "3des": CipherSuite.DES3_CBC,
    "aes": CipherSuite.AES_128_CBC,
}


@click.group()
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
def cli(verbose: int):
    configure_logging(verbose)


def build_settings(block_size: int, workers: int) -> AttackSettings:
    try:
        return AttackSettings(block_size=block_size, workers=workers)
    except ValidationError as e:
        raise click.UsageError(str(e))


def solver(
    oracle: OracleFn,
    target_hex: str,
    preceding_hex: Optional[str],
    settings: AttackSettings,
    show_ui: bool = True,
) -> BlockResult:
    """Run the attack, optionally with a live view fed from a worker thread."""
    if not show_ui:
        return solve_block(target_hex, oracle, preceding_block_hex=preceding_hex, settings=settings)

    preceding = parse_block(preceding_hex, settings.block_size) if preceding_hex else None
    state_queue: SingleSlotQueue[StateSnapshot] = SingleSlotQueue()
    publisher = SnapshotPublisher(state_queue, settings.block_size, preceding)

    def attack() -> BlockResult:
        try:
            return solve_block(
                target_hex,
                oracle,
                preceding_block_hex=preceding_hex,
                settings=settings,
                observer=publisher,
            )
        finally:
            # Always close the queue so the UI can exit.
            publisher.finish()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(attack)

        try:
            ui_loop(state_queue)
        except KeyboardInterrupt:
            state_queue.close()

        return future.result()


def run_and_report(
    oracle: OracleFn,
    target_hex: str,
    preceding_hex: Optional[str],
    settings: AttackSettings,
    show_ui: bool,
) -> BlockResult:
    try:
        result = solver(oracle, target_hex, preceding_hex, settings, show_ui=show_ui)
    except PadProbeError as e:
        raise click.ClickException(str(e)) from e

    Console().print(render_result(result))
    return result


@cli.command()
@click.option("--preceding", "-p", required=True, help="True preceding block (IV or Cₙ₋₁) as hex.")
@click.option("--target", "-t", required=True, help="Target ciphertext block Cₙ as hex.")
@click.option(
    "--oracle",
    "-o",
    "oracle_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Python file defining check(forged_block, target_block) -> bool.",
)
@click.option("--block-size", "-b", default=8, show_default=True, help="Cipher block size in bytes.")
@click.option("--workers", "-w", default=1, show_default=True, help="Concurrent oracle queries per guess window.")
@click.option("--no-ui", is_flag=True, help="Skip the live view.")
def decrypt(preceding: str, target: str, oracle_path: str, block_size: int, workers: int, no_ui: bool):
    """Decrypt one block with a user defined oracle plugin."""
    settings = build_settings(block_size, workers)
    try:
        oracle = load_oracle_fn(oracle_path)
    except PadProbeError as e:
        raise click.ClickException(str(e)) from e

    run_and_report(oracle, target, preceding, settings, show_ui=not no_ui)


@cli.command()
@click.option("--plaintext", "-m", default="HELLO", show_default=True, help="Message to encrypt; must fit in one block.")
@click.option("--cipher", "cipher_name", type=click.Choice(sorted(DEMO_CIPHERS)), default="3des", show_default=True)
@click.option("--iv", default=None, help="Fixed IV as hex; random when omitted.")
@click.option("--workers", "-w", default=1, show_default=True, help="Concurrent oracle queries per guess window.")
@click.option("--no-ui", is_flag=True, help="Skip the live view.")
def demo(plaintext: str, cipher_name: str, iv: Optional[str], workers: int, no_ui: bool):
    """Encrypt a message under a random key and attack it with a local oracle."""
    suite = DEMO_CIPHERS[cipher_name]
    message = plaintext.encode("utf-8")
    if len(message) >= suite.block_size:
        raise click.BadParameter(
            f"must be shorter than {suite.block_size} bytes to fit in one padded block",
            param_hint="--plaintext",
        )

    settings = build_settings(suite.block_size, workers)
    oracle = PaddingOracle(suite)
    try:
        iv_bytes = parse_block(iv, suite.block_size) if iv is not None else None
    except PadProbeError as e:
        raise click.BadParameter(str(e), param_hint="--iv") from e
    iv_bytes, ciphertext = oracle.encrypt(message, iv=iv_bytes)

    click.echo(f"Cipher:               {suite}")
    click.echo(f"Preceding block (IV): {bytes_to_hex(iv_bytes)}")
    click.echo(f"Target block:         {bytes_to_hex(ciphertext)}")

    result = run_and_report(oracle.check, bytes_to_hex(ciphertext), bytes_to_hex(iv_bytes), settings, show_ui=not no_ui)
    if result.plaintext != message:
        click.echo("Recovered plaintext does not match; the first guess at position 1 was a false positive.", err=True)


if __name__ == "__main__":
    cli()
