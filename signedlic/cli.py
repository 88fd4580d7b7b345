"""
Command-line interface for signedlic.
"""

from __future__ import annotations

from pathlib import Path

import click

from signedlic.client.client import LicenseClient
from signedlic.client.domain.entities import PurchasedLicense, TrialLicense
from signedlic.client.infrastructure.device import (
    SystemDeviceIdentifierProvider,
    format_device_id,
)
from signedlic.client.infrastructure.storage import FileKeyValueStore
from signedlic.common.config import Config
from signedlic.common.exceptions import LicensingError
from signedlic.common.models import ClientConfig
from signedlic.keygen import KeyGenerator

keys_dir_option = click.option(
    "--keys-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory of trusted public keys (default: SIGNEDLIC_KEYS_DIR or ~/.signedlic/keys)",
)
store_option = click.option(
    "--store",
    "store_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="License store file (default: ~/.signedlic/license_store.json)",
)


def _make_client(
    keys_dir: Path | None,
    store_path: Path | None,
    trial_url: str | None = None,
    purchase_url: str | None = None,
) -> LicenseClient:
    client_config = ClientConfig(
        trusted_keys_dir=keys_dir,
        store_path=store_path,
        trial_activation_url=trial_url,
        purchase_activation_url=purchase_url,
    )
    try:
        return LicenseClient(client_config=client_config)
    except ValueError as err:
        raise click.ClickException(str(err)) from err


def _describe(license_: TrialLicense | PurchasedLicense) -> str:
    if isinstance(license_, TrialLicense):
        state = "expired" if license_.is_expired() else "active"
        return (
            f"Trial license ({state}), expires "
            f"{license_.expiration_date.isoformat()}"
        )
    return f"Purchased license, key ending in ...{license_.license_key[-4:]}"


def _fail(err: LicensingError) -> click.ClickException:
    return click.ClickException(f"{type(err).__name__}: {err}")


@click.group()
def cli() -> None:
    """signedlic license activation CLI"""


@cli.command()
@click.option(
    "--keys-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to save keys (default: SIGNEDLIC_KEYS_DIR or ~/.signedlic/keys)",
)
def keygen(keys_dir: Path | None) -> None:
    """Generate an RSA-4096 activation key pair"""
    keygen = KeyGenerator(keys_dir=keys_dir)
    public_path, private_path = keygen.generate_keys()
    click.echo(f"Keys generated and saved to {public_path.parent}")
    click.echo(f"Move {private_path.name} to the activation server.")


@cli.command("device-id")
def device_id() -> None:
    """Print this device's identifier"""
    resolved = SystemDeviceIdentifierProvider().resolve()
    if resolved is None:
        msg = "No device identifier is available on this system"
        raise click.ClickException(msg)
    click.echo(format_device_id(resolved))


@cli.command("activate-trial")
@click.option("--url", default=None, help="Trial activation endpoint (default: SIGNEDLIC_TRIAL_URL)")
@keys_dir_option
@store_option
def activate_trial(url: str | None, keys_dir: Path | None, store_path: Path | None) -> None:
    """Activate a trial license for this device"""
    client = _make_client(keys_dir, store_path, trial_url=url)
    try:
        license_ = client.activate_trial()
    except LicensingError as err:
        raise _fail(err) from err
    except ValueError as err:
        raise click.ClickException(str(err)) from err
    click.echo(f"Activated: {_describe(license_)}")


@cli.command("activate-purchase")
@click.argument("license_key")
@click.option("--url", default=None, help="Purchase activation endpoint (default: SIGNEDLIC_PURCHASE_URL)")
@keys_dir_option
@store_option
def activate_purchase(
    license_key: str, url: str | None, keys_dir: Path | None, store_path: Path | None
) -> None:
    """Activate a purchased license key for this device"""
    client = _make_client(keys_dir, store_path, purchase_url=url)
    try:
        license_ = client.activate_purchase(license_key)
    except LicensingError as err:
        raise _fail(err) from err
    except ValueError as err:
        raise click.ClickException(str(err)) from err
    click.echo(f"Activated: {_describe(license_)}")


@cli.command()
@keys_dir_option
@store_option
def show(keys_dir: Path | None, store_path: Path | None) -> None:
    """Load and verify the stored license"""
    client = _make_client(keys_dir, store_path)
    try:
        license_ = client.load_license()
    except LicensingError as err:
        raise _fail(err) from err
    if license_ is None:
        click.echo("No license")
        return
    click.echo(_describe(license_))


@cli.command()
@store_option
def deactivate(store_path: Path | None) -> None:
    """Remove the stored license from this device"""
    config = Config()
    store = FileKeyValueStore(store_path or config.STORE_PATH)
    store.delete(config.LICENSE_STORE_KEY)
    click.echo("Stored license removed")


if __name__ == "__main__":
    cli()
