import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('events', '0001_initial'),
        ('teams', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='EventRegistration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_type', models.CharField(choices=[('individual', 'Individual'), ('team', 'Team')], max_length=16)),
                ('status', models.CharField(choices=[('registered', 'Registered')], default='registered', max_length=32)),
                ('registered_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='registrations', to='events.event')),
                ('team', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='event_registrations', to='teams.team')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='event_registrations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [models.Index(fields=['event', 'registered_at'], name='reg_event_registered_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('event', 'team'), name='unique_event_team_registration'),
                    models.UniqueConstraint(fields=('event', 'user'), name='unique_event_user_registration'),
                    models.CheckConstraint(condition=models.Q(models.Q(('registration_type', 'team'), ('team__isnull', False), ('user__isnull', True)), models.Q(('registration_type', 'individual'), ('team__isnull', True), ('user__isnull', False)), _connector='OR'), name='registration_matches_type'),
                ],
            },
        ),
    ]
