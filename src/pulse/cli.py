"""CLI for the pulse sleep analysis toolkit."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path

import click

from pulse.analytics.classifier import ClassifierError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _resolve_classifier(spec: str | None):
    from pulse.analytics.classifier import MotionThresholdClassifier, load_classifier

    if spec is None:
        return MotionThresholdClassifier()
    try:
        return load_classifier(spec)
    except ClassifierError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """pulse — sleep analysis from heart rate and wrist motion."""
    _configure_logging(verbose)


@main.command("analyze")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--classifier", "-c", default=None,
              help="Classifier as 'module:attribute' (default: motion threshold).")
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Calendar day of the first row (default: today).")
@click.option("--output", "-o", default=None, help="Write the result JSON to file.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def analyze_cmd(
    file: str,
    classifier: str | None,
    day: datetime | None,
    output: str | None,
    as_json: bool,
) -> None:
    """Find the best sleep session in a recorded CSV file."""
    from pulse.analytics.pipeline import analyze_recording

    clf = _resolve_classifier(classifier)
    text = Path(file).read_text()

    try:
        result = analyze_recording(
            text, clf, reference_day=day.date() if day else None
        )
    except ClassifierError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(result.to_json())
    else:
        report = result.report
        click.echo(f"\n{'=' * 50}")
        click.echo(f"  Sleep Report: {Path(file).name}")
        click.echo(f"{'=' * 50}")
        click.echo(f"  Samples:    {result.sample_count} "
                   f"({len(result.classifications)} windows)")
        click.echo(f"  Bed time:   {report.bed_time}")
        click.echo(f"  Wake time:  {report.wake_time}")
        click.echo(f"  Duration:   {report.sleep_duration}")
        click.echo(f"  Efficiency: {report.efficiency}")
        if result.chart:
            click.echo("  Heart rate:")
            for p in result.chart:
                click.echo(f"    {p.date:%H:%M}  {p.value:5.1f} bpm")
        click.echo(f"{'=' * 50}")

    if output:
        with open(output, "w") as f:
            f.write(result.to_json())
        click.echo(f"\nResult written to {output}")


@main.command("features")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Calendar day of the first row (default: today).")
@click.option("--output", "-o", type=click.File("w"), default="-",
              help="CSV output path (default: stdout).")
def features_cmd(file: str, day: datetime | None, output) -> None:
    """Dump the batch feature vectors of a recording as CSV."""
    from pulse.analytics.features import FEATURE_NAMES, extract_batch_features
    from pulse.recording import load_recording

    samples = load_recording(file, reference_day=day.date() if day else None)
    windows = extract_batch_features(samples)

    writer = csv.writer(output)
    writer.writerow(["index", "timestamp", *FEATURE_NAMES])
    for w in windows:
        writer.writerow([w.index, w.timestamp.isoformat(), *(f"{v:.6f}" for v in w.features)])


@main.command("replay")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--classifier", "-c", default=None,
              help="Classifier as 'module:attribute' (default: motion threshold).")
@click.option("--every", "-n", default=60, show_default=True,
              help="Print every Nth live update.")
def replay_cmd(file: str, classifier: str | None, every: int) -> None:
    """Feed a recording through the live buffer, sample by sample.

    The live clock follows the recording's timestamps, so the output shows
    what the live path would have published during the night.
    """
    from pulse.processor import SleepProcessor
    from pulse.recording import load_recording

    if every < 1:
        raise click.BadParameter("must be at least 1", param_hint="--every")

    samples = load_recording(file)
    if not samples:
        click.echo("No usable rows.")
        return

    clock = [samples[0].timestamp]
    processor = SleepProcessor(
        classifier=_resolve_classifier(classifier),
        clock=lambda: clock[0],
    )

    for i, sample in enumerate(samples):
        clock[0] = sample.timestamp
        try:
            # The magnitude is already reduced; pass it on a single axis.
            processor.add(sample.heart_rate, sample.vector_magnitude, 0.0, 0.0)
        except ClassifierError as e:
            raise click.ClickException(str(e)) from e

        if i % every == 0:
            state = processor.state
            label = "asleep" if state.is_sleeping else "awake"
            vector = ", ".join(f"{v:.2f}" for v in state.feature_vector)
            click.echo(f"[{sample.timestamp:%H:%M:%S}] {label:6s} [{vector}]")

    click.echo(f"\nReplayed {len(samples)} samples.")


if __name__ == "__main__":
    main()
