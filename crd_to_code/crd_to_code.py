import json
import logging

import click

from . import __version__
from .cli_utils import reconstruct_command_line
from .pipeline import (
    CrdToCodeError,
    Derive,
    GeneratorConfig,
    MapType,
    PipelineGenerator,
    SchemaMode,
    load_crd,
)


def _parse_derives(ctx, param, values):
    try:
        return [Derive.parse(value) for value in values]
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command()
@click.version_option(__version__, prog_name="crd_to_code")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--api-version", default=None, type=str, help="Use this CRD version if multiple versions are present")
@click.option("--hide-prelude", is_flag=True, default=False, help="Do not emit the prelude")
@click.option("--hide-kube", is_flag=True, default=False, help="Do not derive CustomResource nor set kube attributes")
@click.option("--docs", "-d", "emit_docs", is_flag=True, default=False, help="Emit doc comments from field descriptions")
@click.option("--builders", "-b", is_flag=True, default=False, help="Emit builder derives via the typed-builder crate")
@click.option(
    "--schema",
    "schema_mode",
    default=None,
    type=click.Choice([mode.value for mode in SchemaMode], case_sensitive=False),
    help="Schema mode to use for kube-derive",
)
@click.option(
    "--derive",
    "-D",
    "derive_traits",
    multiple=True,
    callback=_parse_derives,
    help="Derive this trait: Trait, Type=Trait, @struct=Trait, @enum=Trait or @enum:simple=Trait",
)
@click.option("--elide", "-e", multiple=True, help="Leave this generated container out of the output")
@click.option("--relaxed", is_flag=True, default=False, help="Interpret untyped values as opaque maps")
@click.option("--no-condition", is_flag=True, default=False, help="Disable standardized Condition detection")
@click.option("--no-object-reference", is_flag=True, default=False, help="Disable standardized ObjectReference detection")
@click.option("--map-type", default=None, type=click.Choice([map_type.value for map_type in MapType]))
@click.option(
    "--smart-derive-elision",
    is_flag=True,
    default=False,
    help="Remove a derived Default from containers that cannot derive it",
)
@click.option(
    "--overrides",
    "override_paths",
    multiple=True,
    type=click.Path(exists=True, resolve_path=True),
    help="Property override rules document (can be repeated)",
)
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("crd_file", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def crd_to_code(
    config,
    api_version,
    hide_prelude,
    hide_kube,
    emit_docs,
    builders,
    schema_mode,
    derive_traits,
    elide,
    relaxed,
    no_condition,
    no_object_reference,
    map_type,
    smart_derive_elision,
    override_paths,
    verbose,
    crd_file,
    output,
):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    if config is not None:
        with open(config) as f:
            config = json.load(f)
            config = GeneratorConfig.from_dict(config)
    else:
        config = GeneratorConfig()

    # Command line flags override the config file when set
    if api_version is not None:
        config.api_version = api_version
    if schema_mode is not None:
        config.schema_mode = SchemaMode(schema_mode.lower())
    if map_type is not None:
        config.map_type = MapType(map_type)
    for flag, value in (
        ("hide_prelude", hide_prelude),
        ("hide_kube", hide_kube),
        ("emit_docs", emit_docs),
        ("builders", builders),
        ("relaxed", relaxed),
        ("no_condition", no_condition),
        ("no_object_reference", no_object_reference),
        ("smart_derive_elision", smart_derive_elision),
    ):
        if value:
            setattr(config, flag, True)
    for derive in derive_traits:
        config.add_derive(derive)
    config.elide.extend(elide)
    config.override_paths.extend(override_paths)

    try:
        crd = load_crd(crd_file)
        codegen = PipelineGenerator(crd, config, command_line=reconstruct_command_line(crd_to_code))
        out = codegen.generate()
    except CrdToCodeError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(out, nl=False)
    else:
        with open(output, "w") as f:
            f.write(out)
