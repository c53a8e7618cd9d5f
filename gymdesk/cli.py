import logging
from datetime import timedelta

import click

from gymdesk.exceptions import AppError
from gymdesk.models import Class, Facility
from gymdesk.utils.instance_generator import generate_instances
from gymdesk.utils.timezone import facility_today

logger = logging.getLogger(__name__)


@click.command('generate-instances')
@click.option('--facility-id', type=int, required=True, help='Facility whose classes are materialized.')
@click.option('--days', type=int, default=None, help='Days ahead to generate (default INSTANCE_GENERATION_DAYS).')
def generate_instances_command(facility_id, days):
    """Materialize class instances for every live class of a facility."""
    from flask import current_app

    facility = Facility.get_or_404(facility_id)
    days = days if days is not None else current_app.config['INSTANCE_GENERATION_DAYS']
    start_date = facility_today(facility.time_zone)
    end_date = start_date + timedelta(days=days)

    classes = (
        Class.query
        .filter(Class.facility_id == facility.id, Class.deleted_at.is_(None))
        .order_by(Class.id)
        .all()
    )
    click.echo(f'Generating instances for {len(classes)} classes from {start_date} to {end_date}...')

    total_created = 0
    for class_record in classes:
        try:
            summary = generate_instances(facility.id, class_record.id, start_date, end_date)
        except AppError as exc:
            # Classes without schedules are expected; keep going
            click.echo(f'  {class_record.name}: skipped ({exc.code})')
            continue
        total_created += summary['instances_created']
        click.echo(
            f"  {class_record.name}: {summary['instances_created']} created, "
            f"{summary['skipped_existing']} existing, {summary['skipped_cancelled']} cancelled"
        )

    click.echo(f'Done. {total_created} instances created.')


def register_commands(app):
    app.cli.add_command(generate_instances_command)
