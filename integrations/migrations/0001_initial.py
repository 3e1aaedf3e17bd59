import uuid

import django.utils.timezone
from django.db import migrations, models

import integrations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='IntegrationCredential',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('name', models.SlugField(help_text='Name referenced by LEAD_SYNC["CREDENTIAL_NAME"]', max_length=100, unique=True)),
                ('auth_type', models.CharField(choices=[('bearer', 'Bearer Token'), ('api_key', 'API Key Header')], default='bearer', max_length=20)),
                ('header_name', models.CharField(default='Authorization', help_text='Header that carries the secret', max_length=100)),
                ('secret', integrations.models.EncryptedTextField(blank=True, help_text='Access token or API key (encrypted)')),
                ('is_active', models.BooleanField(default=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Integration Credential',
                'verbose_name_plural': 'Integration Credentials',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='IntegrationSyncLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('run_id', models.UUIDField(db_index=True)),
                ('chunk_number', models.PositiveIntegerField(default=1)),
                ('integration_name', models.CharField(max_length=100)),
                ('status', models.CharField(choices=[('idle', 'Idle'), ('running', 'Running'), ('rescheduled', 'Rescheduled'), ('completed', 'Completed'), ('failed', 'Failed')], default='running', max_length=20)),
                ('records_in_chunk', models.PositiveIntegerField(default=0)),
                ('records_succeeded', models.PositiveIntegerField(default=0)),
                ('records_failed', models.PositiveIntegerField(default=0)),
                ('records_remaining', models.PositiveIntegerField(default=0)),
                ('error_message', models.TextField(blank=True)),
                ('task_id', models.CharField(blank=True, max_length=255)),
                ('next_task_id', models.CharField(blank=True, max_length=255)),
                ('started_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Integration Sync Log',
                'verbose_name_plural': 'Integration Sync Logs',
                'ordering': ['-started_at'],
                'indexes': [
                    models.Index(fields=['run_id', 'chunk_number'], name='integ_synclog_run_chunk_idx'),
                    models.Index(fields=['status', '-started_at'], name='integ_synclog_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='IntegrationErrorLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('integration_name', models.CharField(db_index=True, max_length=100)),
                ('record_id', models.TextField(blank=True, help_text='Affected record id, or comma separated ids for a batch failure')),
                ('error_kind', models.CharField(choices=[('ApiError', 'API Error'), ('TransportError', 'Transport Error'), ('PersistenceError', 'Persistence Error'), ('SchedulingUnavailable', 'Scheduling Unavailable'), ('UnexpectedError', 'Unexpected Error')], max_length=30)),
                ('message', models.TextField()),
                ('status_code', models.PositiveIntegerField(blank=True, null=True)),
                ('raw_response', models.TextField(blank=True)),
                ('logged_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Integration Error Log',
                'verbose_name_plural': 'Integration Error Logs',
                'ordering': ['-logged_at'],
                'permissions': [('write_raw_response', 'Can record raw integration responses')],
                'indexes': [
                    models.Index(fields=['integration_name', '-logged_at'], name='integ_errlog_name_idx'),
                    models.Index(fields=['error_kind'], name='integ_errlog_kind_idx'),
                ],
            },
        ),
    ]
